# backend/ecom_api/db/models/product_model.py
"""
Modelos de producto, imágenes de producto y asociaciones producto ↔ producto.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, Text, UniqueConstraint

from ecom_api.db.database import Base, JSONType, new_uuid, utcnow

class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_uuid)
    sku = Column(String(64), nullable=False, unique=True, index=True)
    path = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    # summary / description / specification
    data = Column(JSONType, nullable=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Product(sku='{self.sku}', path='{self.path}')>"


class Image(Base):
    __tablename__ = "product_images"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    w = Column(Integer, nullable=False, default=0)
    h = Column(Integer, nullable=False, default=0)
    path = Column(Text, nullable=False)
    typ = Column(String(16), nullable=False)
    ori = Column(Boolean, nullable=False, default=True)
    up = Column(Boolean, nullable=False, default=False)
    pri = Column(Integer, nullable=False)
    size = Column(Integer, nullable=False, default=0)
    q = Column(Integer, nullable=False, default=100)
    gsurl = Column(Text, nullable=True)
    data = Column(JSONType, nullable=True)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class PPAssocGroup(Base):
    __tablename__ = "pp_assoc_groups"

    id = Column(String(36), primary_key=True, default=new_uuid)
    code = Column(String(32), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class PPAssoc(Base):
    __tablename__ = "pp_assocs"

    id = Column(String(36), primary_key=True, default=new_uuid)
    pp_assoc_group_id = Column(String(36), ForeignKey("pp_assoc_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    product_from = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    product_to = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('pp_assoc_group_id', 'product_from', 'product_to', name='uq_pp_assoc'),
    )
