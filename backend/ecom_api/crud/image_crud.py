# backend/ecom_api/crud/image_crud.py
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.product_model import Image

PRI_STEP = 10


async def get_image(db: AsyncSession, image_id: str) -> Optional[Image]:
    result = await db.execute(select(Image).filter(Image.id == image_id))
    return result.scalars().first()


async def get_images_by_product(db: AsyncSession, product_id: str) -> List[Image]:
    result = await db.execute(select(Image).filter(Image.product_id == product_id).order_by(Image.pri))
    return list(result.scalars().all())


async def next_pri(db: AsyncSession, product_id: str) -> int:
    result = await db.execute(select(func.max(Image.pri)).filter(Image.product_id == product_id))
    return (result.scalar() or 0) + PRI_STEP


async def create_image(db: AsyncSession, **fields) -> Image:
    db_image = Image(**fields)
    db.add(db_image)
    await db.flush()
    return db_image


async def delete_image(db: AsyncSession, db_image: Image) -> None:
    await db.delete(db_image)
    await db.flush()


async def delete_images_by_product(db: AsyncSession, product_id: str) -> int:
    result = await db.execute(delete(Image).where(Image.product_id == product_id))
    return result.rowcount or 0
