# backend/ecom_api/schemas/order_schema.py
"""
Se encarga de definir los esquemas Pydantic de pedidos.

Un pedido se crea por una de dos vías, nunca ambas:
- usuario: cart_id, user_id, billing_address_id, shipping_address_id
- invitado: cart_id, contact_name, email, billing, shipping
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

from .common_schema import StrictModel, UUIDStr
from .user_schema import AddressIn


class OrderStatus(str, Enum):
    """Define los posibles estados de una orden."""
    PENDING = "pending"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"


USER_FIELDS = ("user_id", "billing_address_id", "shipping_address_id")
GUEST_FIELDS = ("contact_name", "email", "billing", "shipping")


class OrderCreate(StrictModel):
    cart_id: UUIDStr
    # Vía de usuario registrado
    user_id: Optional[UUIDStr] = None
    billing_address_id: Optional[UUIDStr] = None
    shipping_address_id: Optional[UUIDStr] = None
    # Vía de invitado
    contact_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    billing: Optional[AddressIn] = None
    shipping: Optional[AddressIn] = None

    @model_validator(mode="after")
    def exactly_one_shape(self):
        user_given = [f for f in USER_FIELDS if getattr(self, f) is not None]
        guest_given = [f for f in GUEST_FIELDS if getattr(self, f) is not None]
        if user_given and guest_given:
            raise ValueError(
                f"user fields {user_given} cannot be combined with guest fields {guest_given}"
            )
        if not user_given and not guest_given:
            raise ValueError(
                "supply either user_id, billing_address_id and shipping_address_id "
                "or contact_name, email, billing and shipping"
            )
        fields = USER_FIELDS if user_given else GUEST_FIELDS
        missing = [f for f in fields if getattr(self, f) is None]
        if missing:
            raise ValueError(f"missing attributes: {', '.join(missing)}")
        return self

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class OrderCustomer(BaseModel):
    id: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None


class OrderItemResponse(BaseModel):
    object: str = "order_item"
    id: str
    product_id: str
    path: str
    sku: str
    name: str
    qty: int
    unit_price: int
    currency: str
    discount: Optional[int] = None
    tax_code: str
    vat: int


class OrderTotals(BaseModel):
    total_ex_vat: int
    vat_total: int
    total_inc_vat: int


class OrderResponse(BaseModel):
    object: str = "order"
    id: str
    order_id: int
    status: str
    payment: str
    customer: OrderCustomer
    currency: str
    billing_address: Dict[str, Any]
    shipping_address: Dict[str, Any]
    items: List[OrderItemResponse]
    totals: OrderTotals
    created: datetime
    modified: datetime


class StripeCheckoutResponse(BaseModel):
    object: str = "stripe_checkout_session"
    id: str
