# backend/ecom_api/db/models/category_model.py
"""
Modelos del catálogo jerárquico.

El árbol de categorías se persiste como un conjunto anidado (nested set):
cada fila lleva sus coordenadas lft/rgt y su profundidad. No existen
punteros al padre; la forma del árbol se reconstruye recorriendo las filas
en pre-orden (ordenadas por lft).
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint

from ecom_api.db.database import Base, new_uuid, utcnow

class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_uuid)
    segment = Column(String(64), nullable=False)
    path = Column(String(1024), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    lft = Column(Integer, nullable=False, unique=True, index=True)
    rgt = Column(Integer, nullable=False, unique=True)
    depth = Column(Integer, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def is_leaf(self) -> bool:
        return self.rgt == self.lft + 1

    def __repr__(self):
        return f"<Category(path='{self.path}', lft={self.lft}, rgt={self.rgt}, depth={self.depth})>"


class ProductCategory(Base):
    """Relación producto ↔ categoría hoja, con prioridad de ordenación."""
    __tablename__ = "product_categories"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    pri = Column(Integer, nullable=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('product_id', 'category_id', name='uq_product_category'),
    )
