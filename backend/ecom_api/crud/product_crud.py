# backend/ecom_api/crud/product_crud.py

"""
Operaciones CRUD para el modelo Product.

Funcionalidades principales:
- Búsqueda por id, sku y path
- Comprobación en bloque de existencia de productos
- Alta, reemplazo y baja
"""

from typing import Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.product_model import Product
from ecom_api.schemas import product_schema

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def get_product(db: AsyncSession, product_id: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.id == product_id))
    return result.scalars().first()


async def get_product_by_sku(db: AsyncSession, sku: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.sku == sku))
    return result.scalars().first()


async def get_product_by_path(db: AsyncSession, path: str) -> Optional[Product]:
    result = await db.execute(select(Product).filter(Product.path == path))
    return result.scalars().first()


async def get_products(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[Product]:
    result = await db.execute(select(Product).order_by(Product.sku).offset(skip).limit(limit))
    return list(result.scalars().all())


async def get_existing_ids(db: AsyncSession, product_ids: Iterable[str]) -> Set[str]:
    """Devuelve el subconjunto de ids que existen."""
    ids = list(set(product_ids))
    if not ids:
        return set()
    result = await db.execute(select(Product.id).filter(Product.id.in_(ids)))
    return set(result.scalars().all())


# ========================================
# OPERACIONES DE ESCRITURA
# ========================================

async def create_product(db: AsyncSession, product: product_schema.ProductCreate) -> Product:
    db_product = Product(**product.model_dump())
    db.add(db_product)
    await db.flush()
    return db_product


async def update_product(db: AsyncSession, db_product: Product, product_in: product_schema.ProductUpdate) -> Product:
    for field, value in product_in.model_dump().items():
        setattr(db_product, field, value)
    await db.flush()
    return db_product


async def delete_product(db: AsyncSession, db_product: Product) -> None:
    await db.delete(db_product)
    await db.flush()
