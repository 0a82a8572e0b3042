# backend/ecom_api/schemas/promo_schema.py
"""
Esquemas de reglas de promoción, ofertas, cupones y tarifas de envío.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .common_schema import StrictModel, UUIDStr


class PromoRuleType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PromoRuleTarget(str, Enum):
    PRODUCT = "product"
    PRODUCTSET = "productset"
    CATEGORY = "category"
    TOTAL = "total"
    SHIPPING = "shipping"


# ========================================
# REGLAS DE PROMOCIÓN
# ========================================

class PromoRuleCreate(StrictModel):
    promo_rule_code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    amount: int = Field(..., ge=0)
    total_threshold: Optional[int] = Field(None, ge=0)
    type: PromoRuleType
    target: PromoRuleTarget
    product_id: Optional[UUIDStr] = None
    product_ids: Optional[List[UUIDStr]] = None
    category_id: Optional[UUIDStr] = None
    shipping_tariff_id: Optional[UUIDStr] = None

    @model_validator(mode="after")
    def check_rule(self):
        if self.type == PromoRuleType.PERCENTAGE and self.amount > 10000:
            raise ValueError("amount must be between 0 and 10000 (0.00% to 100.00%)")
        if self.start_at and self.end_at and self.start_at >= self.end_at:
            raise ValueError("start_at must be before end_at")
        required = {
            PromoRuleTarget.PRODUCT: ("product_id", self.product_id),
            PromoRuleTarget.PRODUCTSET: ("product_ids", self.product_ids),
            PromoRuleTarget.CATEGORY: ("category_id", self.category_id),
            PromoRuleTarget.SHIPPING: ("shipping_tariff_id", self.shipping_tariff_id),
        }
        if self.target in required:
            name, value = required[self.target]
            if not value:
                raise ValueError(f"target {self.target.value} requires {name}")
        return self


class PromoRuleResponse(BaseModel):
    object: str = "promo_rule"
    id: str
    promo_rule_code: str
    name: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    amount: int
    total_threshold: Optional[int] = None
    type: str
    target: str
    product_id: Optional[str] = None
    product_ids: Optional[List[str]] = None
    category_id: Optional[str] = None
    shipping_tariff_id: Optional[str] = None
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# OFERTAS
# ========================================

class OfferCreate(StrictModel):
    promo_rule_id: UUIDStr


class OfferResponse(BaseModel):
    object: str = "offer"
    id: str
    promo_rule_id: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# CUPONES
# ========================================

class CouponCreate(StrictModel):
    coupon_code: str = Field(..., pattern=r"^[A-Za-z0-9]{1,32}$")
    promo_rule_id: UUIDStr
    reusable: bool = False


class CouponUpdate(StrictModel):
    void: bool


class CouponResponse(BaseModel):
    object: str = "coupon"
    id: str
    coupon_code: str
    promo_rule_id: str
    void: bool
    reusable: bool
    spend_count: int
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# TARIFAS DE ENVÍO
# ========================================

class ShippingTariffCreate(StrictModel):
    country_code: str = Field(..., pattern=r"^[A-Z]{2}$")
    shipping_code: str = Field(..., min_length=1, max_length=32)
    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0)
    tax_code: str = Field(..., min_length=1, max_length=16)


class ShippingTariffUpdate(StrictModel):
    country_code: Optional[str] = Field(None, pattern=r"^[A-Z]{2}$")
    shipping_code: Optional[str] = Field(None, min_length=1, max_length=32)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[int] = Field(None, ge=0)
    tax_code: Optional[str] = Field(None, min_length=1, max_length=16)


class ShippingTariffResponse(BaseModel):
    object: str = "shipping_tariff"
    id: str
    country_code: str
    shipping_code: str
    name: str
    price: int
    tax_code: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)
