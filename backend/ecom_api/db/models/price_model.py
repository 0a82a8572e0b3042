# backend/ecom_api/db/models/price_model.py
"""
Listas de precios y precios por (producto, lista de precios).

Los importes son enteros en unidades menores de la divisa (céntimos/peniques).
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Text, UniqueConstraint

from ecom_api.db.database import Base, new_uuid, utcnow

class PriceList(Base):
    __tablename__ = "price_lists"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(String(16), nullable=False, unique=True)
    currency_code = Column(String(3), nullable=False)
    strategy = Column(String(16), nullable=False, default="simple")
    inc_tax = Column(Boolean, nullable=False, default=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class Price(Base):
    __tablename__ = "prices"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    price_list_id = Column(String(36), ForeignKey("price_lists.id"), nullable=False, index=True)
    unit_price = Column(Integer, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('product_id', 'price_list_id', name='uq_price_product_price_list'),
    )
