# backend/ecom_api/api/v1/endpoints/promotions.py
"""
Endpoints de promociones: reglas, ofertas, cupones y tarifas de envío.

Cada recurso tiene su propio router; api_router los monta con su prefijo.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import promo_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.promo_service import promo_service

logger = logging.getLogger(__name__)

promo_rules_router = APIRouter()
offers_router = APIRouter()
coupons_router = APIRouter()
shipping_tariffs_router = APIRouter()

# ========================================
# REGLAS DE PROMOCIÓN
# ========================================

@promo_rules_router.post("", response_model=promo_schema.PromoRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_promo_rule(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreatePromoRule")),
    rule_in: promo_schema.PromoRuleCreate,
):
    logger.info(f"🏷️ PROMO: Creando regla '{rule_in.promo_rule_code}' ({rule_in.type.value}/{rule_in.target.value})")
    return await promo_service.create_promo_rule(db, rule_in)


@promo_rules_router.get("", response_model=ListResponse[promo_schema.PromoRuleResponse])
async def list_promo_rules(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListPromoRules")),
):
    return {"data": await promo_service.list_promo_rules(db)}


@promo_rules_router.get("/{promo_rule_id}", response_model=promo_schema.PromoRuleResponse)
async def get_promo_rule(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetPromoRule")),
    promo_rule_id: deps.UUIDPath,
):
    return await promo_service.get_promo_rule(db, promo_rule_id)


@promo_rules_router.delete("/{promo_rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_promo_rule(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeletePromoRule")),
    promo_rule_id: deps.UUIDPath,
) -> None:
    await promo_service.delete_promo_rule(db, promo_rule_id)


# ========================================
# OFERTAS
# ========================================

@offers_router.post("", response_model=promo_schema.OfferResponse, status_code=status.HTTP_201_CREATED)
async def activate_offer(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ActivateOffer")),
    offer_in: promo_schema.OfferCreate,
):
    return await promo_service.activate_offer(db, offer_in.promo_rule_id)


@offers_router.get("", response_model=ListResponse[promo_schema.OfferResponse])
async def list_offers(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListOffers")),
):
    return {"data": await promo_service.list_offers(db)}


@offers_router.get("/{offer_id}", response_model=promo_schema.OfferResponse)
async def get_offer(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetOffer")),
    offer_id: deps.UUIDPath,
):
    return await promo_service.get_offer(db, offer_id)


@offers_router.delete("/{offer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_offer(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeactivateOffer")),
    offer_id: deps.UUIDPath,
) -> None:
    await promo_service.deactivate_offer(db, offer_id)


# ========================================
# CUPONES
# ========================================

@coupons_router.post("", response_model=promo_schema.CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateCoupon")),
    coupon_in: promo_schema.CouponCreate,
):
    return await promo_service.create_coupon(db, coupon_in)


@coupons_router.get("", response_model=ListResponse[promo_schema.CouponResponse])
async def list_coupons(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListCoupons")),
):
    return {"data": await promo_service.list_coupons(db)}


@coupons_router.get("/{coupon_id}", response_model=promo_schema.CouponResponse)
async def get_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetCoupon")),
    coupon_id: deps.UUIDPath,
):
    return await promo_service.get_coupon(db, coupon_id)


@coupons_router.patch("/{coupon_id}", response_model=promo_schema.CouponResponse)
async def update_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateCoupon")),
    coupon_id: deps.UUIDPath,
    coupon_in: promo_schema.CouponUpdate,
):
    """Sólo admite cambiar 'void'."""
    return await promo_service.update_coupon(db, coupon_id, coupon_in)


@coupons_router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteCoupon")),
    coupon_id: deps.UUIDPath,
) -> None:
    await promo_service.delete_coupon(db, coupon_id)


# ========================================
# TARIFAS DE ENVÍO
# ========================================

@shipping_tariffs_router.post("", response_model=promo_schema.ShippingTariffResponse, status_code=status.HTTP_201_CREATED)
async def create_shipping_tariff(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateShippingTariff")),
    tariff_in: promo_schema.ShippingTariffCreate,
):
    return await promo_service.create_shipping_tariff(db, tariff_in)


@shipping_tariffs_router.get("", response_model=ListResponse[promo_schema.ShippingTariffResponse])
async def list_shipping_tariffs(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListShippingTariffs")),
):
    return {"data": await promo_service.list_shipping_tariffs(db)}


@shipping_tariffs_router.get("/{shipping_tariff_id}", response_model=promo_schema.ShippingTariffResponse)
async def get_shipping_tariff(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetShippingTariff")),
    shipping_tariff_id: deps.UUIDPath,
):
    return await promo_service.get_shipping_tariff(db, shipping_tariff_id)


@shipping_tariffs_router.patch("/{shipping_tariff_id}", response_model=promo_schema.ShippingTariffResponse)
async def update_shipping_tariff(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateShippingTariff")),
    shipping_tariff_id: deps.UUIDPath,
    tariff_in: promo_schema.ShippingTariffUpdate,
):
    return await promo_service.update_shipping_tariff(db, shipping_tariff_id, tariff_in)


@shipping_tariffs_router.delete("/{shipping_tariff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shipping_tariff(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteShippingTariff")),
    shipping_tariff_id: deps.UUIDPath,
) -> None:
    await promo_service.delete_shipping_tariff(db, shipping_tariff_id)
