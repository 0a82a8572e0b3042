# backend/ecom_api/crud/promo_crud.py
"""
Operaciones CRUD para reglas de promoción, ofertas y cupones.
"""

from typing import List, Optional

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.cart_model import CartCoupon
from ecom_api.db.models.promo_model import Coupon, Offer, PromoRule

# ========================================
# REGLAS DE PROMOCIÓN
# ========================================

async def get_promo_rule(db: AsyncSession, promo_rule_id: str) -> Optional[PromoRule]:
    result = await db.execute(select(PromoRule).filter(PromoRule.id == promo_rule_id))
    return result.scalars().first()


async def get_promo_rule_by_code(db: AsyncSession, code: str) -> Optional[PromoRule]:
    result = await db.execute(select(PromoRule).filter(PromoRule.promo_rule_code == code))
    return result.scalars().first()


async def get_promo_rules(db: AsyncSession) -> List[PromoRule]:
    result = await db.execute(select(PromoRule).order_by(PromoRule.created))
    return list(result.scalars().all())


async def create_promo_rule(db: AsyncSession, **fields) -> PromoRule:
    db_obj = PromoRule(**fields)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_promo_rule(db: AsyncSession, db_obj: PromoRule) -> None:
    await db.delete(db_obj)
    await db.flush()


# ========================================
# OFERTAS
# ========================================

async def get_offer(db: AsyncSession, offer_id: str) -> Optional[Offer]:
    result = await db.execute(select(Offer).filter(Offer.id == offer_id))
    return result.scalars().first()


async def get_offer_by_promo_rule(db: AsyncSession, promo_rule_id: str) -> Optional[Offer]:
    result = await db.execute(select(Offer).filter(Offer.promo_rule_id == promo_rule_id))
    return result.scalars().first()


async def get_offers(db: AsyncSession) -> List[Offer]:
    result = await db.execute(select(Offer).order_by(Offer.created))
    return list(result.scalars().all())


async def create_offer(db: AsyncSession, promo_rule_id: str) -> Offer:
    db_obj = Offer(promo_rule_id=promo_rule_id)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_offer(db: AsyncSession, db_obj: Offer) -> None:
    await db.delete(db_obj)
    await db.flush()


# ========================================
# CUPONES
# ========================================

async def get_coupon(db: AsyncSession, coupon_id: str, for_update: bool = False) -> Optional[Coupon]:
    query = select(Coupon).filter(Coupon.id == coupon_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalars().first()


async def get_coupon_by_code(db: AsyncSession, coupon_code: str) -> Optional[Coupon]:
    result = await db.execute(select(Coupon).filter(Coupon.coupon_code == coupon_code))
    return result.scalars().first()


async def get_coupons(db: AsyncSession) -> List[Coupon]:
    result = await db.execute(select(Coupon).order_by(Coupon.coupon_code))
    return list(result.scalars().all())


async def create_coupon(db: AsyncSession, coupon_code: str, promo_rule_id: str, reusable: bool) -> Coupon:
    db_obj = Coupon(coupon_code=coupon_code, promo_rule_id=promo_rule_id, reusable=reusable, void=False, spend_count=0)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def coupon_in_use(db: AsyncSession, coupon_id: str) -> bool:
    result = await db.execute(select(exists().where(CartCoupon.coupon_id == coupon_id)))
    return bool(result.scalar())


async def delete_coupon(db: AsyncSession, db_obj: Coupon) -> None:
    await db.delete(db_obj)
    await db.flush()
