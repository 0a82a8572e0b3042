# backend/ecom_api/db/models/stock_model.py
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime

from ecom_api.db.database import Base, new_uuid, utcnow

class Inventory(Base):
    """Existencias por producto. Se crea una fila al crear el producto."""
    __tablename__ = "inventory"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True)
    onhand = Column(Integer, nullable=False, default=0)
    overselling = Column(Boolean, nullable=False, default=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
