# backend/ecom_api/crud/cart_crud.py
"""
Operaciones CRUD para carritos, líneas de carrito y cupones aplicados.

Las mutaciones de líneas bloquean primero la fila del carrito
(SELECT ... FOR UPDATE) para serializar los cambios de un mismo carrito.
"""

from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.cart_model import Cart, CartCoupon, CartItem
from ecom_api.db.models.product_model import Product
from ecom_api.db.models.promo_model import Coupon

# ========================================
# CARRITOS
# ========================================

async def get_cart(db: AsyncSession, cart_id: str, for_update: bool = False) -> Optional[Cart]:
    query = select(Cart).filter(Cart.id == cart_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalars().first()


async def create_cart(db: AsyncSession) -> Cart:
    db_cart = Cart()
    db.add(db_cart)
    await db.flush()
    return db_cart


# ========================================
# LÍNEAS
# ========================================

def item_to_dict(item: CartItem, product: Product) -> dict:
    return {
        "object": "cart_item",
        "id": item.id,
        "cart_id": item.cart_id,
        "product_id": item.product_id,
        "sku": product.sku,
        "name": product.name,
        "qty": item.qty,
        "unit_price": item.unit_price,
        "created": item.created,
        "modified": item.modified,
    }


async def get_cart_item(db: AsyncSession, cart_id: str, product_id: str) -> Optional[CartItem]:
    result = await db.execute(
        select(CartItem).filter(CartItem.cart_id == cart_id, CartItem.product_id == product_id)
    )
    return result.scalars().first()


async def get_cart_items(db: AsyncSession, cart_id: str, for_update: bool = False) -> List[Tuple[CartItem, Product]]:
    query = (
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .filter(CartItem.cart_id == cart_id)
        .order_by(CartItem.created, CartItem.id)
    )
    if for_update:
        query = query.with_for_update(of=CartItem)
    result = await db.execute(query)
    return list(result.all())


async def create_cart_item(db: AsyncSession, cart_id: str, product_id: str, qty: int, unit_price: int) -> CartItem:
    db_item = CartItem(cart_id=cart_id, product_id=product_id, qty=qty, unit_price=unit_price)
    db.add(db_item)
    await db.flush()
    return db_item


async def delete_cart_item(db: AsyncSession, db_item: CartItem) -> None:
    await db.delete(db_item)
    await db.flush()


async def delete_cart_items(db: AsyncSession, cart_id: str) -> int:
    result = await db.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
    return result.rowcount or 0


async def delete_cart_items_for_product(db: AsyncSession, product_id: str) -> None:
    await db.execute(delete(CartItem).where(CartItem.product_id == product_id))


# ========================================
# CUPONES APLICADOS
# ========================================

def cart_coupon_to_dict(cart_coupon: CartCoupon, coupon: Coupon) -> dict:
    return {
        "object": "cart_coupon",
        "id": cart_coupon.id,
        "cart_id": cart_coupon.cart_id,
        "coupon_id": coupon.id,
        "coupon_code": coupon.coupon_code,
        "promo_rule_id": coupon.promo_rule_id,
        "created": cart_coupon.created,
        "modified": cart_coupon.modified,
    }


async def get_cart_coupon(db: AsyncSession, cart_coupon_id: str) -> Optional[Tuple[CartCoupon, Coupon]]:
    result = await db.execute(
        select(CartCoupon, Coupon)
        .join(Coupon, CartCoupon.coupon_id == Coupon.id)
        .filter(CartCoupon.id == cart_coupon_id)
    )
    return result.first()


async def get_cart_coupon_by_pair(db: AsyncSession, cart_id: str, coupon_id: str) -> Optional[CartCoupon]:
    result = await db.execute(
        select(CartCoupon).filter(CartCoupon.cart_id == cart_id, CartCoupon.coupon_id == coupon_id)
    )
    return result.scalars().first()


async def get_cart_coupons(db: AsyncSession, cart_id: str) -> List[Tuple[CartCoupon, Coupon]]:
    result = await db.execute(
        select(CartCoupon, Coupon)
        .join(Coupon, CartCoupon.coupon_id == Coupon.id)
        .filter(CartCoupon.cart_id == cart_id)
        .order_by(CartCoupon.created)
    )
    return list(result.all())


async def create_cart_coupon(db: AsyncSession, cart_id: str, coupon_id: str) -> CartCoupon:
    db_obj = CartCoupon(cart_id=cart_id, coupon_id=coupon_id)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_cart_coupon(db: AsyncSession, db_obj: CartCoupon) -> None:
    await db.delete(db_obj)
    await db.flush()
