# backend/ecom_api/api/v1/endpoints/orders.py
"""
Endpoints de pedidos y del inicio del pago con Stripe.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import order_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.order_service import order_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=order_schema.OrderResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("PlaceOrder")),
    order_in: order_schema.OrderCreate,
):
    """
    Crea un pedido a partir de un carrito.

    El cuerpo lleva una de dos formas: usuario registrado (user_id y los ids
    de sus direcciones) o invitado (contact_name, email y las direcciones
    completas). El carrito no se vacía.
    """
    kind = "invitado" if order_in.is_guest else f"usuario {order_in.user_id}"
    logger.info(f"🧾 PEDIDO: Colocando pedido del carrito {order_in.cart_id} ({kind})")
    return await order_service.place_order(db, principal, order_in)


@router.get("", response_model=ListResponse[order_schema.OrderResponse])
async def list_orders(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListOrders")),
    user_id: Optional[str] = Query(None, pattern=UUID_PATTERN),
):
    return {"data": await order_service.list_orders(db, principal, user_id)}


@router.get("/{order_id}", response_model=order_schema.OrderResponse)
async def get_order(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetOrder")),
    order_id: deps.UUIDPath,
):
    return await order_service.get_order(db, principal, order_id)


@router.post("/{order_id}/stripecheckout", response_model=order_schema.StripeCheckoutResponse,
             status_code=status.HTTP_201_CREATED)
async def stripe_checkout(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("StripeCheckout")),
    order_id: deps.UUIDPath,
):
    """Crea una sesión de Stripe Checkout para el pedido."""
    session_id = await order_service.begin_checkout(db, principal, order_id)
    logger.info(f"💳 PEDIDO: Sesión de Stripe {session_id} para el pedido {order_id}")
    return {"id": session_id}
