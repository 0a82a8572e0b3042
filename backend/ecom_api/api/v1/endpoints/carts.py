# backend/ecom_api/api/v1/endpoints/carts.py
"""
Endpoints del carrito de compras y de los cupones aplicados a carritos.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import cart_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.cart_service import cart_service

logger = logging.getLogger(__name__)

carts_router = APIRouter()
carts_coupons_router = APIRouter()

# ========================================
# CARRITOS Y LÍNEAS
# ========================================

@carts_router.post("", response_model=cart_schema.CartResponse, status_code=status.HTTP_201_CREATED)
async def create_cart(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateCart")),
):
    cart = await cart_service.create_cart(db)
    logger.info(f"🛒 CARRITO: Creado carrito {cart.id}")
    return cart


@carts_router.post("/{cart_id}/items", response_model=cart_schema.CartItemResponse, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("AddToCart")),
    cart_id: deps.UUIDPath,
    item_in: cart_schema.CartItemCreate,
):
    """Añade un producto al carrito con el precio vigente de la lista por defecto."""
    logger.info(f"🛒 CARRITO: Añadiendo {item_in.qty} x {item_in.product_id} al carrito {cart_id}")
    return await cart_service.add_item(db, cart_id, item_in.product_id, item_in.qty)


@carts_router.get("/{cart_id}/items", response_model=ListResponse[cart_schema.CartItemResponse])
async def get_cart_items(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetCartItems")),
    cart_id: deps.UUIDPath,
):
    return {"data": await cart_service.list_items(db, cart_id)}


@carts_router.patch("/{cart_id}/items/{product_id}", response_model=cart_schema.CartItemResponse)
async def update_cart_item(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateCartItem")),
    cart_id: deps.UUIDPath,
    product_id: deps.UUIDPath,
    item_in: cart_schema.CartItemUpdate,
):
    return await cart_service.update_item(db, cart_id, product_id, item_in.qty)


@carts_router.delete("/{cart_id}/items/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cart_item(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteCartItem")),
    cart_id: deps.UUIDPath,
    product_id: deps.UUIDPath,
) -> None:
    await cart_service.delete_item(db, cart_id, product_id)


@carts_router.delete("/{cart_id}/items", status_code=status.HTTP_204_NO_CONTENT)
async def empty_cart_items(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("EmptyCartItems")),
    cart_id: deps.UUIDPath,
) -> None:
    """Vacía el carrito. Un carrito ya vacío responde 409."""
    await cart_service.empty(db, cart_id)


# ========================================
# CUPONES DEL CARRITO
# ========================================

@carts_coupons_router.post("", response_model=cart_schema.CartCouponResponse, status_code=status.HTTP_201_CREATED)
async def apply_coupon_to_cart(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ApplyCouponToCart")),
    cart_coupon_in: cart_schema.CartCouponCreate,
):
    return await cart_service.apply_coupon(db, cart_coupon_in.cart_id, cart_coupon_in.coupon_id)


@carts_coupons_router.get("", response_model=ListResponse[cart_schema.CartCouponResponse])
async def list_cart_coupons(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListCartCoupons")),
    cart_id: str = Query(..., pattern=UUID_PATTERN),
):
    return {"data": await cart_service.list_cart_coupons(db, cart_id)}


@carts_coupons_router.get("/{cart_coupon_id}", response_model=cart_schema.CartCouponResponse)
async def get_cart_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetCartCoupon")),
    cart_coupon_id: deps.UUIDPath,
):
    return await cart_service.get_cart_coupon(db, cart_coupon_id)


@carts_coupons_router.delete("/{cart_coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unapply_cart_coupon(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UnapplyCartCoupon")),
    cart_coupon_id: deps.UUIDPath,
) -> None:
    await cart_service.unapply_coupon(db, cart_coupon_id)
