# backend/ecom_api/crud/category_crud.py

"""
Operaciones de persistencia del conjunto anidado de categorías.

El árbol sólo se modifica por reemplazo completo: no hay altas ni bajas de
nodos individuales. Las funciones de este módulo no confirman la
transacción; lo hace la capa de servicio.

Funcionalidades principales:
- Lectura de filas en pre-orden (ORDER BY lft)
- Reemplazo atómico de todas las filas
- Purga del árbol completo
- Búsqueda por id y por path
"""

from typing import List, Optional, Sequence

from sqlalchemy import delete, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.category_model import Category, ProductCategory
from ecom_api.utils.nestedset import NestedSetRow

# ========================================
# OPERACIONES DE LECTURA (READ)
# ========================================

async def has_catalog(db: AsyncSession) -> bool:
    """Consulta la base de datos en cada llamada; no hay caché."""
    result = await db.execute(select(exists().where(Category.id.isnot(None))))
    return bool(result.scalar())


async def get_categories_ordered(db: AsyncSession) -> List[Category]:
    """Devuelve todas las filas en pre-orden."""
    result = await db.execute(select(Category).order_by(Category.lft))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: str) -> Optional[Category]:
    result = await db.execute(select(Category).filter(Category.id == category_id))
    return result.scalars().first()


async def get_categories_by_paths(db: AsyncSession, paths: Sequence[str]) -> List[Category]:
    if not paths:
        return []
    result = await db.execute(select(Category).filter(Category.path.in_(list(paths))))
    return list(result.scalars().all())


async def has_product_categories(db: AsyncSession) -> bool:
    result = await db.execute(select(exists().where(ProductCategory.id.isnot(None))))
    return bool(result.scalar())


async def count_categories(db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Category.id)))
    return result.scalar() or 0


# ========================================
# OPERACIONES DE ESCRITURA
# ========================================

async def replace_nested_set(db: AsyncSession, rows: List[NestedSetRow]) -> List[Category]:
    """
    Sustituye todas las filas del árbol por las recibidas.

    Se borra y se inserta dentro de la misma transacción del llamador, de
    forma que o se reemplazan todas o ninguna.
    """
    await db.execute(delete(Category))
    await db.flush()
    categories = [
        Category(segment=r.segment, path=r.path, name=r.name, lft=r.lft, rgt=r.rgt, depth=r.depth)
        for r in rows
    ]
    db.add_all(categories)
    await db.flush()
    return categories


async def purge_categories(db: AsyncSession) -> int:
    result = await db.execute(delete(Category))
    return result.rowcount or 0
