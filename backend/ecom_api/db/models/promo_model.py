# backend/ecom_api/db/models/promo_model.py
"""
Reglas de promoción y sus activaciones: ofertas y cupones.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime

from ecom_api.db.database import Base, JSONType, new_uuid, utcnow

class PromoRule(Base):
    __tablename__ = "promo_rules"

    id = Column(String(36), primary_key=True, default=new_uuid)
    promo_rule_code = Column(String(32), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=True)
    end_at = Column(DateTime(timezone=True), nullable=True)
    # percentage: puntos básicos (0-10000); fixed: unidades menores
    amount = Column(Integer, nullable=False)
    total_threshold = Column(Integer, nullable=True)
    type = Column(String(16), nullable=False)
    target = Column(String(16), nullable=False)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=True)
    product_ids = Column(JSONType, nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    shipping_tariff_id = Column(String(36), ForeignKey("shipping_tariffs.id", ondelete="CASCADE"), nullable=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Offer(Base):
    __tablename__ = "offers"

    id = Column(String(36), primary_key=True, default=new_uuid)
    promo_rule_id = Column(String(36), ForeignKey("promo_rules.id", ondelete="CASCADE"), nullable=False, unique=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(String(36), primary_key=True, default=new_uuid)
    coupon_code = Column(String(32), nullable=False, unique=True, index=True)
    promo_rule_id = Column(String(36), ForeignKey("promo_rules.id", ondelete="CASCADE"), nullable=False)
    void = Column(Boolean, nullable=False, default=False)
    reusable = Column(Boolean, nullable=False, default=False)
    spend_count = Column(Integer, nullable=False, default=0)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
