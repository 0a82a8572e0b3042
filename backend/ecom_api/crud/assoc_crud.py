# backend/ecom_api/crud/assoc_crud.py
"""
Operaciones CRUD para grupos y asociaciones producto ↔ producto.
"""

from typing import List, Optional, Sequence

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.product_model import PPAssoc, PPAssocGroup

# ========================================
# GRUPOS
# ========================================

async def get_group(db: AsyncSession, group_id: str) -> Optional[PPAssocGroup]:
    result = await db.execute(select(PPAssocGroup).filter(PPAssocGroup.id == group_id))
    return result.scalars().first()


async def get_group_by_code(db: AsyncSession, code: str) -> Optional[PPAssocGroup]:
    result = await db.execute(select(PPAssocGroup).filter(PPAssocGroup.code == code))
    return result.scalars().first()


async def get_groups(db: AsyncSession) -> List[PPAssocGroup]:
    result = await db.execute(select(PPAssocGroup).order_by(PPAssocGroup.code))
    return list(result.scalars().all())


async def create_group(db: AsyncSession, code: str, name: str) -> PPAssocGroup:
    db_group = PPAssocGroup(code=code, name=name)
    db.add(db_group)
    await db.flush()
    return db_group


async def group_has_assocs(db: AsyncSession, group_id: str) -> bool:
    result = await db.execute(select(exists().where(PPAssoc.pp_assoc_group_id == group_id)))
    return bool(result.scalar())


async def delete_group(db: AsyncSession, db_group: PPAssocGroup) -> None:
    await db.delete(db_group)
    await db.flush()


# ========================================
# ASOCIACIONES
# ========================================

async def get_assoc(db: AsyncSession, assoc_id: str) -> Optional[PPAssoc]:
    result = await db.execute(select(PPAssoc).filter(PPAssoc.id == assoc_id))
    return result.scalars().first()


async def get_assocs(db: AsyncSession, group_id: Optional[str] = None, product_from: Optional[str] = None) -> List[PPAssoc]:
    query = select(PPAssoc)
    if group_id is not None:
        query = query.filter(PPAssoc.pp_assoc_group_id == group_id)
    if product_from is not None:
        query = query.filter(PPAssoc.product_from == product_from)
    result = await db.execute(query.order_by(PPAssoc.created))
    return list(result.scalars().all())


async def replace_assocs(db: AsyncSession, group_id: str, product_from: str, products_to: Sequence[str]) -> List[PPAssoc]:
    await db.execute(
        delete(PPAssoc).where(
            PPAssoc.pp_assoc_group_id == group_id,
            PPAssoc.product_from == product_from,
        )
    )
    assocs = [
        PPAssoc(pp_assoc_group_id=group_id, product_from=product_from, product_to=product_to)
        for product_to in products_to
    ]
    db.add_all(assocs)
    await db.flush()
    return assocs


async def delete_assoc(db: AsyncSession, db_assoc: PPAssoc) -> None:
    await db.delete(db_assoc)
    await db.flush()


async def delete_assocs_for_product(db: AsyncSession, product_id: str) -> None:
    await db.execute(
        delete(PPAssoc).where((PPAssoc.product_from == product_id) | (PPAssoc.product_to == product_id))
    )
