# backend/ecom_api/db/models/cart_model.py
"""
Carritos persistentes: líneas con precio congelado y cupones aplicados.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint

from ecom_api.db.database import Base, new_uuid, utcnow

class Cart(Base):
    __tablename__ = "carts"

    id = Column(String(36), primary_key=True, default=new_uuid)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=new_uuid)
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('cart_id', 'product_id', name='uq_cart_item_cart_product'),
    )


class CartCoupon(Base):
    __tablename__ = "cart_coupons"

    id = Column(String(36), primary_key=True, default=new_uuid)
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    coupon_id = Column(String(36), ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('cart_id', 'coupon_id', name='uq_cart_coupon'),
    )
