# backend/ecom_api/schemas/cart_schema.py
"""
Se encarga de definir los esquemas Pydantic para el carrito de compras.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common_schema import StrictModel, UUIDStr


class CartResponse(BaseModel):
    object: str = "cart"
    id: str
    created: datetime

    model_config = ConfigDict(from_attributes=True)


class CartItemCreate(StrictModel):
    """Línea nueva: producto y cantidad (mínimo 1)."""
    product_id: UUIDStr
    qty: int = Field(..., ge=1)


class CartItemUpdate(StrictModel):
    qty: int = Field(..., ge=1)


class CartItemResponse(BaseModel):
    """Línea del carrito con el precio unitario congelado al añadirla."""
    object: str = "cart_item"
    id: str
    cart_id: str
    product_id: str
    sku: str
    name: str
    qty: int
    unit_price: int
    created: datetime
    modified: datetime


class CartCouponCreate(StrictModel):
    cart_id: UUIDStr
    coupon_id: UUIDStr


class CartCouponResponse(BaseModel):
    object: str = "cart_coupon"
    id: str
    cart_id: str
    coupon_id: str
    coupon_code: str
    promo_rule_id: str
    created: datetime
    modified: datetime
