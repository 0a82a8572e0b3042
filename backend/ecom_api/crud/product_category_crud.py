# backend/ecom_api/crud/product_category_crud.py
"""
Operaciones CRUD para las relaciones producto ↔ categoría hoja.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.category_model import Category, ProductCategory
from ecom_api.db.models.product_model import Product

PRI_STEP = 10


def product_snapshot(product: Product) -> dict:
    return {
        "object": "product",
        "id": product.id,
        "path": product.path,
        "sku": product.sku,
        "name": product.name,
        "created": product.created,
        "modified": product.modified,
    }


async def get_product_category(db: AsyncSession, product_category_id: str) -> Optional[ProductCategory]:
    result = await db.execute(select(ProductCategory).filter(ProductCategory.id == product_category_id))
    return result.scalars().first()


async def get_by_pair(db: AsyncSession, product_id: str, category_id: str) -> Optional[ProductCategory]:
    result = await db.execute(
        select(ProductCategory).filter(
            ProductCategory.product_id == product_id,
            ProductCategory.category_id == category_id,
        )
    )
    return result.scalars().first()


async def next_pri(db: AsyncSession, category_id: str) -> int:
    """Prioridad por defecto: MAX(pri) + 10 dentro de la categoría, o 10."""
    result = await db.execute(
        select(func.max(ProductCategory.pri)).filter(ProductCategory.category_id == category_id)
    )
    current = result.scalar()
    return (current or 0) + PRI_STEP


async def create_product_category(db: AsyncSession, product_id: str, category_id: str, pri: int) -> ProductCategory:
    db_obj = ProductCategory(product_id=product_id, category_id=category_id, pri=pri)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_product_category(db: AsyncSession, db_obj: ProductCategory) -> None:
    await db.delete(db_obj)
    await db.flush()


async def delete_for_categories(db: AsyncSession, category_ids: Sequence[str]) -> None:
    if category_ids:
        await db.execute(delete(ProductCategory).where(ProductCategory.category_id.in_(list(category_ids))))


async def delete_all(db: AsyncSession) -> int:
    result = await db.execute(delete(ProductCategory))
    return result.rowcount or 0


async def list_joined(db: AsyncSession) -> List[dict]:
    """Relaciones con datos del producto y la categoría, por path y prioridad."""
    query = (
        select(ProductCategory, Product, Category)
        .join(Product, ProductCategory.product_id == Product.id)
        .join(Category, ProductCategory.category_id == Category.id)
        .order_by(Category.lft, ProductCategory.pri)
    )
    result = await db.execute(query)
    return [
        {
            "object": "product_category",
            "id": pc.id,
            "product_id": p.id,
            "product_path": p.path,
            "product_sku": p.sku,
            "product_name": p.name,
            "category_id": c.id,
            "category_path": c.path,
            "pri": pc.pri,
            "created": pc.created,
            "modified": pc.modified,
        }
        for pc, p, c in result.all()
    ]


async def products_by_category(db: AsyncSession) -> Dict[str, List[dict]]:
    """Mapa category_id → productos asociados ordenados por prioridad."""
    query = (
        select(ProductCategory.category_id, Product)
        .join(Product, ProductCategory.product_id == Product.id)
        .order_by(ProductCategory.category_id, ProductCategory.pri)
    )
    result = await db.execute(query)
    out: Dict[str, List[dict]] = defaultdict(list)
    for category_id, product in result.all():
        out[category_id].append(product_snapshot(product))
    return dict(out)


async def products_by_category_path(db: AsyncSession) -> Dict[str, List[dict]]:
    query = (
        select(Category.path, Product)
        .join(ProductCategory, ProductCategory.category_id == Category.id)
        .join(Product, ProductCategory.product_id == Product.id)
        .order_by(Category.lft, ProductCategory.pri)
    )
    result = await db.execute(query)
    out: Dict[str, List[dict]] = defaultdict(list)
    for path, product in result.all():
        out[path].append(product_snapshot(product))
    return dict(out)


async def delete_product_categories_for_product(db: AsyncSession, product_id: str) -> None:
    await db.execute(delete(ProductCategory).where(ProductCategory.product_id == product_id))


async def get_product_ids_for_category(db: AsyncSession, category_id: str) -> List[str]:
    result = await db.execute(
        select(ProductCategory.product_id).filter(ProductCategory.category_id == category_id)
    )
    return list(result.scalars().all())
