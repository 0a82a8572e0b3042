# backend/ecom_api/schemas/user_schema.py
"""
Esquemas de usuarios y direcciones.

AddressIn es también la forma de la instantánea de dirección que se guarda
dentro de un pedido.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common_schema import StrictModel, UUIDStr


class AddressType(str, Enum):
    BILLING = "billing"
    SHIPPING = "shipping"


# ========================================
# USUARIOS
# ========================================

class UserCreate(StrictModel):
    email: EmailStr
    firstname: str = Field("", max_length=255)
    lastname: str = Field("", max_length=255)
    role: str = Field("customer", pattern=r"^(customer|admin)$")
    uid: Optional[str] = Field(None, max_length=128)
    price_list_id: Optional[UUIDStr] = None


class UserResponse(BaseModel):
    object: str = "user"
    id: str
    uid: Optional[str] = None
    role: str
    email: str
    firstname: str
    lastname: str
    price_list_id: Optional[str] = None
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# DIRECCIONES
# ========================================

class AddressIn(StrictModel):
    contact_name: str = Field(..., min_length=1, max_length=255)
    addr1: str = Field(..., min_length=1, max_length=255)
    addr2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=255)
    county: Optional[str] = Field(None, max_length=255)
    postcode: str = Field(..., min_length=1, max_length=32)
    country: str = Field(..., pattern=r"^[A-Z]{2}$")


class AddressCreate(AddressIn):
    user_id: UUIDStr
    typ: AddressType


class AddressUpdate(StrictModel):
    typ: Optional[AddressType] = None
    contact_name: Optional[str] = Field(None, min_length=1, max_length=255)
    addr1: Optional[str] = Field(None, min_length=1, max_length=255)
    addr2: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=255)
    county: Optional[str] = Field(None, max_length=255)
    postcode: Optional[str] = Field(None, min_length=1, max_length=32)
    country: Optional[str] = Field(None, pattern=r"^[A-Z]{2}$")


class AddressResponse(BaseModel):
    object: str = "address"
    id: str
    user_id: str
    typ: str
    contact_name: str
    addr1: str
    addr2: Optional[str] = None
    city: str
    county: Optional[str] = None
    postcode: str
    country: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)
