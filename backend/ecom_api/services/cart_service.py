# backend/ecom_api/services/cart_service.py
"""
Servicio de Carrito de Compras para la aplicación.

Los carritos viven en la base de datos. Cada mutación de líneas bloquea la
fila del carrito durante su transacción, de modo que los cambios sobre un
mismo carrito se serializan y la unicidad (carrito, producto) se mantiene.
El precio unitario se congela al añadir la línea.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import (
    CartContainsNoItems,
    CartCouponExists,
    CartCouponNotFound,
    CartItemExists,
    CartItemNotFound,
    CartNotFound,
    CouponNotFound,
    ProductNotFound,
)
from ecom_api.crud import cart_crud, product_crud, promo_crud
from ecom_api.db.models.cart_model import Cart
from ecom_api.services.pricing_service import pricing_service
from ecom_api.services.promo_service import check_coupon

logger = logging.getLogger(__name__)


class CartService:

    async def _locked_cart(self, db: AsyncSession, cart_id: str) -> Cart:
        cart = await cart_crud.get_cart(db, cart_id, for_update=True)
        if cart is None:
            raise CartNotFound()
        return cart

    async def create_cart(self, db: AsyncSession) -> Cart:
        cart = await cart_crud.create_cart(db)
        await db.commit()
        return cart

    # ========================================
    # LÍNEAS DEL CARRITO
    # ========================================

    async def add_item(self, db: AsyncSession, cart_id: str, product_id: str, qty: int) -> dict:
        """
        Añade un producto con su precio de la lista por defecto.
        Un producto ya presente en el carrito es un conflicto, no una suma.
        """
        await self._locked_cart(db, cart_id)
        product = await product_crud.get_product(db, product_id)
        if product is None:
            raise ProductNotFound()
        if await cart_crud.get_cart_item(db, cart_id, product_id):
            raise CartItemExists()

        price = await pricing_service.resolve(db, product_id)
        item = await cart_crud.create_cart_item(db, cart_id, product_id, qty, price.unit_price)
        await db.commit()
        return cart_crud.item_to_dict(item, product)

    async def update_item(self, db: AsyncSession, cart_id: str, product_id: str, qty: int) -> dict:
        await self._locked_cart(db, cart_id)
        item = await cart_crud.get_cart_item(db, cart_id, product_id)
        if item is None:
            raise CartItemNotFound()
        item.qty = qty
        await db.commit()
        product = await product_crud.get_product(db, product_id)
        return cart_crud.item_to_dict(item, product)

    async def delete_item(self, db: AsyncSession, cart_id: str, product_id: str) -> None:
        await self._locked_cart(db, cart_id)
        item = await cart_crud.get_cart_item(db, cart_id, product_id)
        if item is None:
            raise CartItemNotFound()
        await cart_crud.delete_cart_item(db, item)
        await db.commit()

    async def empty(self, db: AsyncSession, cart_id: str) -> None:
        await self._locked_cart(db, cart_id)
        deleted = await cart_crud.delete_cart_items(db, cart_id)
        if deleted == 0:
            raise CartContainsNoItems()
        await db.commit()

    async def list_items(self, db: AsyncSession, cart_id: str) -> List[dict]:
        if await cart_crud.get_cart(db, cart_id) is None:
            raise CartNotFound()
        return [cart_crud.item_to_dict(item, product) for item, product in await cart_crud.get_cart_items(db, cart_id)]

    # ========================================
    # CUPONES
    # ========================================

    async def apply_coupon(self, db: AsyncSession, cart_id: str, coupon_id: str, now: Optional[datetime] = None) -> dict:
        """
        Aplica un cupón al carrito. Orden de comprobación: carrito, cupón,
        ya aplicado a este carrito, y después las invariantes del cupón.
        """
        await self._locked_cart(db, cart_id)
        coupon = await promo_crud.get_coupon(db, coupon_id)
        if coupon is None:
            raise CouponNotFound(f"coupon {coupon_id} not found")
        if await cart_crud.get_cart_coupon_by_pair(db, cart_id, coupon.id):
            raise CartCouponExists()
        promo_rule = await promo_crud.get_promo_rule(db, coupon.promo_rule_id)
        check_coupon(coupon, promo_rule, now=now)

        cart_coupon = await cart_crud.create_cart_coupon(db, cart_id, coupon.id)
        await db.commit()
        logger.info(f"Cupón {coupon.coupon_code} aplicado al carrito {cart_id}")
        return cart_crud.cart_coupon_to_dict(cart_coupon, coupon)

    async def get_cart_coupon(self, db: AsyncSession, cart_coupon_id: str) -> dict:
        row = await cart_crud.get_cart_coupon(db, cart_coupon_id)
        if row is None:
            raise CartCouponNotFound()
        return cart_crud.cart_coupon_to_dict(*row)

    async def list_cart_coupons(self, db: AsyncSession, cart_id: str) -> List[dict]:
        if await cart_crud.get_cart(db, cart_id) is None:
            raise CartNotFound()
        return [cart_crud.cart_coupon_to_dict(cc, c) for cc, c in await cart_crud.get_cart_coupons(db, cart_id)]

    async def unapply_coupon(self, db: AsyncSession, cart_coupon_id: str) -> None:
        row = await cart_crud.get_cart_coupon(db, cart_coupon_id)
        if row is None:
            raise CartCouponNotFound()
        await cart_crud.delete_cart_coupon(db, row[0])
        await db.commit()


# Instancia única del servicio
cart_service = CartService()
