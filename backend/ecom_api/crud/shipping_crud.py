# backend/ecom_api/crud/shipping_crud.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.shipping_model import ShippingTariff


async def get_shipping_tariff(db: AsyncSession, shipping_tariff_id: str) -> Optional[ShippingTariff]:
    result = await db.execute(select(ShippingTariff).filter(ShippingTariff.id == shipping_tariff_id))
    return result.scalars().first()


async def get_shipping_tariff_by_code(db: AsyncSession, shipping_code: str) -> Optional[ShippingTariff]:
    result = await db.execute(select(ShippingTariff).filter(ShippingTariff.shipping_code == shipping_code))
    return result.scalars().first()


async def get_shipping_tariffs(db: AsyncSession) -> List[ShippingTariff]:
    result = await db.execute(select(ShippingTariff).order_by(ShippingTariff.shipping_code))
    return list(result.scalars().all())


async def create_shipping_tariff(db: AsyncSession, **fields) -> ShippingTariff:
    db_obj = ShippingTariff(**fields)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_shipping_tariff(db: AsyncSession, db_obj: ShippingTariff) -> None:
    await db.delete(db_obj)
    await db.flush()
