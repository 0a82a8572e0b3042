# backend/ecom_api/crud/price_crud.py
"""
Operaciones CRUD para listas de precios y precios.
"""

from typing import List, Optional

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.price_model import Price, PriceList
from ecom_api.db.models.user_model import User

# ========================================
# LISTAS DE PRECIOS
# ========================================

async def get_price_list(db: AsyncSession, price_list_id: str) -> Optional[PriceList]:
    result = await db.execute(select(PriceList).filter(PriceList.id == price_list_id))
    return result.scalars().first()


async def get_price_list_by_code(db: AsyncSession, code: str) -> Optional[PriceList]:
    result = await db.execute(select(PriceList).filter(PriceList.code == code))
    return result.scalars().first()


async def get_price_lists(db: AsyncSession) -> List[PriceList]:
    result = await db.execute(select(PriceList).order_by(PriceList.code))
    return list(result.scalars().all())


async def create_price_list(db: AsyncSession, **fields) -> PriceList:
    db_obj = PriceList(**fields)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def price_list_in_use(db: AsyncSession, price_list_id: str) -> bool:
    """Una lista está en uso si la referencian precios o usuarios."""
    prices = await db.execute(select(exists().where(Price.price_list_id == price_list_id)))
    if prices.scalar():
        return True
    users = await db.execute(select(exists().where(User.price_list_id == price_list_id)))
    return bool(users.scalar())


async def delete_price_list(db: AsyncSession, db_obj: PriceList) -> None:
    await db.delete(db_obj)
    await db.flush()


# ========================================
# PRECIOS
# ========================================

async def get_price(db: AsyncSession, product_id: str, price_list_id: str) -> Optional[Price]:
    """(producto, lista) es único, así que la búsqueda devuelve una sola fila."""
    result = await db.execute(
        select(Price).filter(Price.product_id == product_id, Price.price_list_id == price_list_id)
    )
    return result.scalars().first()


async def get_prices_by_product(db: AsyncSession, product_id: str) -> List[Price]:
    result = await db.execute(select(Price).filter(Price.product_id == product_id))
    return list(result.scalars().all())


async def upsert_price(db: AsyncSession, product_id: str, price_list_id: str, unit_price: int) -> Price:
    db_price = await get_price(db, product_id, price_list_id)
    if db_price is None:
        db_price = Price(product_id=product_id, price_list_id=price_list_id, unit_price=unit_price)
        db.add(db_price)
    else:
        db_price.unit_price = unit_price
    await db.flush()
    return db_price


async def delete_prices_for_product(db: AsyncSession, product_id: str) -> None:
    await db.execute(delete(Price).where(Price.product_id == product_id))
