# backend/ecom_api/services/promo_service.py
"""
Reglas de promoción, ofertas, cupones y tarifas de envío.

También contiene las dos piezas de lógica de promociones que usan los
carritos y los pedidos:
- check_coupon(): invariantes de un cupón en un instante dado.
- compute_discounts(): descuento por línea que produce una regla.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import (
    CategoryNotFound,
    CouponExists,
    CouponExpired,
    CouponInUse,
    CouponNotAtStartDate,
    CouponNotFound,
    CouponUsed,
    CouponVoid,
    OfferExists,
    OfferNotFound,
    ProductNotFound,
    PromoRuleExists,
    PromoRuleNotFound,
    ShippingTariffCodeExists,
    ShippingTariffNotFound,
)
from ecom_api.crud import category_crud, product_crud, promo_crud, shipping_crud
from ecom_api.db.database import as_utc, utcnow
from ecom_api.db.models.promo_model import Coupon, Offer, PromoRule
from ecom_api.db.models.shipping_model import ShippingTariff
from ecom_api.schemas import promo_schema

logger = logging.getLogger(__name__)


def check_coupon(coupon: Coupon, promo_rule: PromoRule, now: Optional[datetime] = None) -> None:
    """
    Comprueba, en este orden, la ventana de validez de la regla, el estado
    void y el uso de un cupón no reutilizable.
    """
    now = as_utc(now or utcnow())
    if promo_rule.start_at is not None and now < as_utc(promo_rule.start_at):
        raise CouponNotAtStartDate(f"coupon '{coupon.coupon_code}' is valid from {promo_rule.start_at.isoformat()}")
    if promo_rule.end_at is not None and now > as_utc(promo_rule.end_at):
        raise CouponExpired(f"coupon '{coupon.coupon_code}' expired at {promo_rule.end_at.isoformat()}")
    if coupon.void:
        raise CouponVoid(f"coupon '{coupon.coupon_code}' has been voided")
    if not coupon.reusable and coupon.spend_count > 0:
        raise CouponUsed(f"coupon '{coupon.coupon_code}' has already been used")


def compute_discounts(promo_rule: PromoRule, lines: Sequence[dict], category_products: Sequence[str] = ()) -> Dict[str, int]:
    """
    Descuento por línea (product_id → importe en unidades menores).

    Cada línea es {"product_id", "qty", "unit_price"}. Las reglas con umbral
    sólo aplican si el total sin IVA antes de descuentos lo alcanza. Un
    descuento fijo se reparte por las líneas elegibles en orden, sin superar
    nunca el importe de una línea.
    """
    subtotal = sum(line["qty"] * line["unit_price"] for line in lines)
    if promo_rule.total_threshold is not None and subtotal < promo_rule.total_threshold:
        return {}

    target = promo_rule.target
    if target == promo_schema.PromoRuleTarget.TOTAL.value:
        eligible = list(lines)
    elif target == promo_schema.PromoRuleTarget.PRODUCT.value:
        eligible = [line for line in lines if line["product_id"] == promo_rule.product_id]
    elif target == promo_schema.PromoRuleTarget.PRODUCTSET.value:
        product_set = set(promo_rule.product_ids or [])
        eligible = [line for line in lines if line["product_id"] in product_set]
    elif target == promo_schema.PromoRuleTarget.CATEGORY.value:
        in_category = set(category_products)
        eligible = [line for line in lines if line["product_id"] in in_category]
    else:
        # Las reglas de envío no descuentan líneas de producto
        eligible = []

    discounts: Dict[str, int] = {}
    if promo_rule.type == promo_schema.PromoRuleType.PERCENTAGE.value:
        for line in eligible:
            amount = round(line["qty"] * line["unit_price"] * promo_rule.amount / 10000)
            if amount:
                discounts[line["product_id"]] = amount
    else:
        remaining = promo_rule.amount
        for line in eligible:
            if remaining <= 0:
                break
            amount = min(remaining, line["qty"] * line["unit_price"])
            discounts[line["product_id"]] = amount
            remaining -= amount
    return discounts


class PromoService:

    # ========================================
    # REGLAS DE PROMOCIÓN
    # ========================================

    async def create_promo_rule(self, db: AsyncSession, rule_in: promo_schema.PromoRuleCreate) -> PromoRule:
        if await promo_crud.get_promo_rule_by_code(db, rule_in.promo_rule_code):
            raise PromoRuleExists()
        if rule_in.product_id and await product_crud.get_product(db, rule_in.product_id) is None:
            raise ProductNotFound()
        if rule_in.product_ids:
            existing = await product_crud.get_existing_ids(db, rule_in.product_ids)
            if len(existing) != len(set(rule_in.product_ids)):
                raise ProductNotFound("product set refers to missing products")
        if rule_in.category_id and await category_crud.get_category(db, rule_in.category_id) is None:
            raise CategoryNotFound()
        if rule_in.shipping_tariff_id and await shipping_crud.get_shipping_tariff(db, rule_in.shipping_tariff_id) is None:
            raise ShippingTariffNotFound()

        fields = rule_in.model_dump()
        fields["type"] = rule_in.type.value
        fields["target"] = rule_in.target.value
        rule = await promo_crud.create_promo_rule(db, **fields)
        await db.commit()
        return rule

    async def get_promo_rule(self, db: AsyncSession, promo_rule_id: str) -> PromoRule:
        rule = await promo_crud.get_promo_rule(db, promo_rule_id)
        if rule is None:
            raise PromoRuleNotFound()
        return rule

    async def list_promo_rules(self, db: AsyncSession) -> List[PromoRule]:
        return await promo_crud.get_promo_rules(db)

    async def delete_promo_rule(self, db: AsyncSession, promo_rule_id: str) -> None:
        rule = await self.get_promo_rule(db, promo_rule_id)
        await promo_crud.delete_promo_rule(db, rule)
        await db.commit()

    # ========================================
    # OFERTAS
    # ========================================

    async def activate_offer(self, db: AsyncSession, promo_rule_id: str) -> Offer:
        await self.get_promo_rule(db, promo_rule_id)
        if await promo_crud.get_offer_by_promo_rule(db, promo_rule_id):
            raise OfferExists()
        offer = await promo_crud.create_offer(db, promo_rule_id)
        await db.commit()
        logger.info(f"Oferta {offer.id} activada para la regla {promo_rule_id}")
        return offer

    async def get_offer(self, db: AsyncSession, offer_id: str) -> Offer:
        offer = await promo_crud.get_offer(db, offer_id)
        if offer is None:
            raise OfferNotFound()
        return offer

    async def list_offers(self, db: AsyncSession) -> List[Offer]:
        return await promo_crud.get_offers(db)

    async def deactivate_offer(self, db: AsyncSession, offer_id: str) -> None:
        offer = await self.get_offer(db, offer_id)
        await promo_crud.delete_offer(db, offer)
        await db.commit()

    # ========================================
    # CUPONES
    # ========================================

    async def create_coupon(self, db: AsyncSession, coupon_in: promo_schema.CouponCreate) -> Coupon:
        if await promo_crud.get_coupon_by_code(db, coupon_in.coupon_code):
            raise CouponExists()
        await self.get_promo_rule(db, coupon_in.promo_rule_id)
        coupon = await promo_crud.create_coupon(db, coupon_in.coupon_code, coupon_in.promo_rule_id, coupon_in.reusable)
        await db.commit()
        return coupon

    async def get_coupon(self, db: AsyncSession, coupon_id: str) -> Coupon:
        coupon = await promo_crud.get_coupon(db, coupon_id)
        if coupon is None:
            raise CouponNotFound()
        return coupon

    async def list_coupons(self, db: AsyncSession) -> List[Coupon]:
        return await promo_crud.get_coupons(db)

    async def update_coupon(self, db: AsyncSession, coupon_id: str, coupon_in: promo_schema.CouponUpdate) -> Coupon:
        """Sólo se puede cambiar 'void'. Anular es administrativo y terminal."""
        coupon = await self.get_coupon(db, coupon_id)
        if coupon.void and not coupon_in.void:
            raise CouponVoid("a voided coupon cannot be reinstated")
        coupon.void = coupon_in.void
        await db.commit()
        return coupon

    async def delete_coupon(self, db: AsyncSession, coupon_id: str) -> None:
        coupon = await self.get_coupon(db, coupon_id)
        if await promo_crud.coupon_in_use(db, coupon.id):
            raise CouponInUse()
        await promo_crud.delete_coupon(db, coupon)
        await db.commit()

    # ========================================
    # TARIFAS DE ENVÍO
    # ========================================

    async def create_shipping_tariff(self, db: AsyncSession, tariff_in: promo_schema.ShippingTariffCreate) -> ShippingTariff:
        if await shipping_crud.get_shipping_tariff_by_code(db, tariff_in.shipping_code):
            raise ShippingTariffCodeExists()
        tariff = await shipping_crud.create_shipping_tariff(db, **tariff_in.model_dump())
        await db.commit()
        return tariff

    async def get_shipping_tariff(self, db: AsyncSession, shipping_tariff_id: str) -> ShippingTariff:
        tariff = await shipping_crud.get_shipping_tariff(db, shipping_tariff_id)
        if tariff is None:
            raise ShippingTariffNotFound()
        return tariff

    async def list_shipping_tariffs(self, db: AsyncSession) -> List[ShippingTariff]:
        return await shipping_crud.get_shipping_tariffs(db)

    async def update_shipping_tariff(self, db: AsyncSession, shipping_tariff_id: str, tariff_in: promo_schema.ShippingTariffUpdate) -> ShippingTariff:
        tariff = await self.get_shipping_tariff(db, shipping_tariff_id)
        changes = {k: v for k, v in tariff_in.model_dump(exclude_unset=True).items() if v is not None}
        new_code = changes.get("shipping_code")
        if new_code and new_code != tariff.shipping_code and await shipping_crud.get_shipping_tariff_by_code(db, new_code):
            raise ShippingTariffCodeExists()
        for field, value in changes.items():
            setattr(tariff, field, value)
        await db.commit()
        return tariff

    async def delete_shipping_tariff(self, db: AsyncSession, shipping_tariff_id: str) -> None:
        tariff = await self.get_shipping_tariff(db, shipping_tariff_id)
        await shipping_crud.delete_shipping_tariff(db, tariff)
        await db.commit()


# Instancia única del servicio
promo_service = PromoService()
