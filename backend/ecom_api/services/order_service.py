# backend/ecom_api/services/order_service.py
"""
Servicio de pedidos: colocación transaccional, lectura y el puente de pago
con Stripe.

La colocación de un pedido es una única transacción que toma los bloqueos
siempre en el mismo orden: carrito, líneas del carrito, direcciones, cupones
y por último el contador de pedidos. El pedido resultante es una
instantánea: precios, productos y direcciones se copian en sus filas. Las
direcciones de invitado se guardan tal cual llegaron.

Los efectos externos (publicar order.created / order.updated, llamar a
Stripe) ocurren sólo después del commit.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.config import settings
from ecom_api.core.exceptions import (
    AddressNotFound,
    BadRequest,
    CartEmpty,
    CartNotFound,
    OrderCounterMissing,
    OrderItemsNotFound,
    OrderNotFound,
    UserNotFound,
)
from ecom_api.core.security import ROLE_ADMIN, ROLE_ROOT, Principal, ensure_owner
from ecom_api.crud import cart_crud, order_crud, product_category_crud, promo_crud, user_crud
from ecom_api.db.models.order_model import Order, OrderItem
from ecom_api.schemas import order_schema
from ecom_api.schemas.user_schema import AddressIn
from ecom_api.services.event_service import ORDER_CREATED, ORDER_UPDATED, event_service
from ecom_api.services.payment_service import payment_service
from ecom_api.services.pricing_service import pricing_service
from ecom_api.services.promo_service import check_coupon, compute_discounts

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def address_snapshot(address) -> dict:
    """Copia de una dirección guardada con la forma de AddressIn."""
    return AddressIn.model_validate(address, from_attributes=True).model_dump(mode="json")


def order_to_dict(order: Order, items: List[OrderItem]) -> dict:
    return {
        "object": "order",
        "id": order.id,
        "order_id": order.order_id,
        "status": order.status,
        "payment": order.payment,
        "customer": {
            "id": order.user_id,
            "contact_name": order.contact_name,
            "email": order.email,
        },
        "currency": order.currency,
        "billing_address": order.billing_address,
        "shipping_address": order.shipping_address,
        "items": [
            {
                "object": "order_item",
                "id": item.id,
                "product_id": item.product_id,
                "path": item.path,
                "sku": item.sku,
                "name": item.name,
                "qty": item.qty,
                "unit_price": item.unit_price,
                "currency": item.currency,
                "discount": item.discount,
                "tax_code": item.tax_code,
                "vat": item.vat,
            }
            for item in items
        ],
        "totals": {
            "total_ex_vat": order.total_ex_vat,
            "vat_total": order.vat_total,
            "total_inc_vat": order.total_inc_vat,
        },
        "created": order.created,
        "modified": order.modified,
    }


class OrderService:

    async def ensure_order_counter(self, db: AsyncSession) -> bool:
        """Siembra el contador de pedidos al arrancar. Idempotente entre réplicas."""
        try:
            created = await order_crud.ensure_order_counter(db)
            await db.commit()
        except IntegrityError:
            # Otra réplica la insertó a la vez
            await db.rollback()
            logger.info("Contador de pedidos ya sembrado por otra instancia")
            return False
        if created:
            logger.info("Contador de pedidos inicializado")
        return created

    # ========================================
    # COLOCACIÓN DEL PEDIDO
    # ========================================

    async def _load_user_addresses(self, db: AsyncSession, order_in: order_schema.OrderCreate):
        user = await user_crud.get_user(db, order_in.user_id)
        if user is None:
            raise UserNotFound()
        addresses = []
        for address_id in (order_in.billing_address_id, order_in.shipping_address_id):
            address = await user_crud.get_address(db, address_id, for_update=True)
            if address is None or address.user_id != user.id:
                raise AddressNotFound(f"address {address_id} not found for user {user.id}")
            addresses.append(address)
        return user, addresses[0], addresses[1]

    async def place_order(self, db: AsyncSession, principal: Principal, order_in: order_schema.OrderCreate,
                          now: Optional[datetime] = None) -> dict:
        """
        Convierte el carrito en un pedido inmutable.

        Totales: total_ex_vat = Σ(qty·unit_price − discount),
        vat_total = Σ vat, total_inc_vat = total_ex_vat + vat_total.
        Cualquier fallo anula la transacción completa.
        """
        if not order_in.is_guest:
            ensure_owner(principal, order_in.user_id)

        cart = await cart_crud.get_cart(db, order_in.cart_id, for_update=True)
        if cart is None:
            raise CartNotFound()
        rows = await cart_crud.get_cart_items(db, cart.id, for_update=True)
        if not rows:
            raise CartEmpty()

        if order_in.is_guest:
            user = None
            price_list_id = None
            contact_name, email = order_in.contact_name, order_in.email
            billing = order_in.billing.model_dump(mode="json", exclude_unset=True)
            shipping = order_in.shipping.model_dump(mode="json", exclude_unset=True)
        else:
            user, billing_row, shipping_row = await self._load_user_addresses(db, order_in)
            price_list_id = user.price_list_id
            contact_name = f"{user.firstname} {user.lastname}".strip() or None
            email = user.email
            billing = address_snapshot(billing_row)
            shipping = address_snapshot(shipping_row)

        # Cupones aplicados: se vuelven a validar bajo bloqueo
        coupons = []
        for _, coupon in await cart_crud.get_cart_coupons(db, cart.id):
            locked = await promo_crud.get_coupon(db, coupon.id, for_update=True)
            promo_rule = await promo_crud.get_promo_rule(db, locked.promo_rule_id)
            check_coupon(locked, promo_rule, now=now)
            coupons.append((locked, promo_rule))

        # Precios de la lista del pedido
        lines = []
        currency = None
        for cart_item, product in rows:
            price = await pricing_service.resolve(db, product.id, price_list_id)
            currency = price.currency
            lines.append({
                "product_id": product.id,
                "path": product.path,
                "sku": product.sku,
                "name": product.name,
                "qty": cart_item.qty,
                "unit_price": price.unit_price,
                "currency": price.currency,
                "tax_code": price.tax_code,
            })

        discounts: Dict[str, int] = {}
        for coupon, promo_rule in coupons:
            category_products = ()
            if promo_rule.category_id:
                category_products = await product_category_crud.get_product_ids_for_category(db, promo_rule.category_id)
            for product_id, amount in compute_discounts(promo_rule, lines, category_products).items():
                discounts[product_id] = discounts.get(product_id, 0) + amount

        total_ex_vat = 0
        vat_total = 0
        for line in lines:
            gross = line["qty"] * line["unit_price"]
            discount = min(discounts.get(line["product_id"], 0), gross)
            net = gross - discount
            line["discount"] = discount or None
            line["vat"] = round(net * settings.VAT_RATE)
            total_ex_vat += net
            vat_total += line["vat"]

        order_id = await order_crud.get_next_order_id(db)
        if order_id is None:
            logger.error("La fila del contador de pedidos no existe; ¿se omitió el arranque?")
            raise OrderCounterMissing()
        order = await order_crud.create_order(
            db,
            {
                "order_id": order_id,
                "status": order_schema.OrderStatus.PENDING.value,
                "payment": order_schema.PaymentStatus.UNPAID.value,
                "user_id": user.id if user else None,
                "contact_name": contact_name,
                "email": email,
                "currency": currency,
                "billing_address": billing,
                "shipping_address": shipping,
                "total_ex_vat": total_ex_vat,
                "vat_total": vat_total,
                "total_inc_vat": total_ex_vat + vat_total,
            },
            lines,
        )

        for coupon, _ in coupons:
            if not coupon.reusable:
                coupon.spend_count += 1

        await db.commit()

        items = await order_crud.get_order_items(db, order.id)
        result = order_to_dict(order, items)
        logger.info(f"Pedido {order.order_id} ({order.id}) creado desde el carrito {cart.id}: {order.total_inc_vat} {order.currency}")

        await event_service.publish_topic_event(ORDER_CREATED, order_schema.OrderResponse.model_validate(result).model_dump(mode="json"))
        return result

    # ========================================
    # LECTURA
    # ========================================

    async def get_order(self, db: AsyncSession, principal: Principal, order_id: str) -> dict:
        order = await order_crud.get_order(db, order_id)
        if order is None:
            raise OrderNotFound()
        if order.user_id is not None:
            ensure_owner(principal, order.user_id)
        items = await order_crud.get_order_items(db, order.id)
        if not items:
            raise OrderItemsNotFound()
        return order_to_dict(order, items)

    async def list_orders(self, db: AsyncSession, principal: Principal, user_id: Optional[str] = None) -> List[dict]:
        if user_id is None and principal.role not in (ROLE_ROOT, ROLE_ADMIN):
            # Un cliente sólo ve sus propios pedidos
            user_id = principal.uid
        if user_id is not None:
            ensure_owner(principal, user_id)
        orders = await order_crud.get_orders(db, user_id=user_id)
        return [order_to_dict(order, await order_crud.get_order_items(db, order.id)) for order in orders]

    # ========================================
    # PAGO CON STRIPE
    # ========================================

    async def begin_checkout(self, db: AsyncSession, principal: Principal, order_id: str) -> str:
        """Crea la sesión de Checkout y guarda la referencia de pago en el pedido."""
        order = await self.get_order(db, principal, order_id)
        session = await payment_service.create_checkout_session(order["id"], order["currency"], order["items"])

        db_order = await order_crud.get_order(db, order_id, for_update=True)
        db_order.stripe_pi = session["payment_intent"] or session["id"]
        await db.commit()
        return session["id"]

    async def process_stripe_event(self, db: AsyncSession, event: dict, raw_body: bytes) -> bool:
        """
        Registra el pago de una sesión completada.

        Idempotente: un segundo aviso para el mismo (pedido, payment intent)
        no vuelve a registrar nada. Devuelve True si se registró el pago.
        """
        if event.get("type") != CHECKOUT_SESSION_COMPLETED:
            logger.info(f"Evento de Stripe '{event.get('type')}' ignorado")
            return False

        session = (event.get("data") or {}).get("object") or {}
        order_id = session.get("client_reference_id")
        payment_intent = session.get("payment_intent")
        if isinstance(payment_intent, dict):
            payment_intent = payment_intent.get("id")
        if not order_id or not payment_intent:
            raise BadRequest("checkout session is missing client_reference_id or payment_intent")

        order = await order_crud.get_order(db, order_id, for_update=True)
        if order is None:
            raise OrderNotFound(f"order {order_id} not found")
        if await order_crud.get_payment(db, order.id, payment_intent):
            logger.info(f"Pago {payment_intent} del pedido {order.id} ya registrado")
            return False

        await order_crud.create_payment(db, order.id, payment_intent, raw_body.decode("utf-8"))
        order.stripe_pi = payment_intent
        order.payment = order_schema.PaymentStatus.PAID.value
        order.status = order_schema.OrderStatus.COMPLETED.value
        await db.commit()
        logger.info(f"Pago {payment_intent} registrado para el pedido {order.order_id}")

        items = await order_crud.get_order_items(db, order.id)
        payload = order_schema.OrderResponse.model_validate(order_to_dict(order, items)).model_dump(mode="json")
        await event_service.publish_topic_event(ORDER_UPDATED, payload)
        return True


# Instancia única del servicio
order_service = OrderService()
