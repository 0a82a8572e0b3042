# backend/ecom_api/db/models/shipping_model.py
from sqlalchemy import Column, Integer, String, DateTime

from ecom_api.db.database import Base, new_uuid, utcnow

class ShippingTariff(Base):
    __tablename__ = "shipping_tariffs"

    id = Column(String(36), primary_key=True, default=new_uuid)
    country_code = Column(String(2), nullable=False)
    shipping_code = Column(String(32), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    tax_code = Column(String(16), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
