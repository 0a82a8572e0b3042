# backend/ecom_api/schemas/price_schema.py
"""
Esquemas de listas de precios, precios e inventario.

Los importes son enteros en unidades menores (p. ej. 1000 = 10,00 GBP).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common_schema import StrictModel, UUIDStr

# ========================================
# LISTAS DE PRECIOS
# ========================================

class PriceListBase(StrictModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    currency_code: str = Field("GBP", pattern=r"^[A-Z]{3}$")
    strategy: str = Field("simple", pattern=r"^(simple|volume|tiered)$")
    inc_tax: bool = False


class PriceListCreate(PriceListBase):
    code: str = Field(..., min_length=3, max_length=16)


class PriceListUpdate(StrictModel):
    code: Optional[str] = Field(None, min_length=3, max_length=16)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    currency_code: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    strategy: Optional[str] = Field(None, pattern=r"^(simple|volume|tiered)$")
    inc_tax: Optional[bool] = None


class PriceListResponse(BaseModel):
    object: str = "price_list"
    id: str
    code: str
    currency_code: str
    strategy: str
    inc_tax: bool
    name: str
    description: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# PRECIOS
# ========================================

class PriceUpdate(StrictModel):
    unit_price: int = Field(..., ge=0)


class PriceResponse(BaseModel):
    object: str = "price"
    id: str
    product_id: str
    price_list_id: str
    unit_price: int
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# INVENTARIO
# ========================================

class InventoryUpdate(StrictModel):
    onhand: int = Field(..., ge=0)
    overselling: Optional[bool] = None


class InventoryBatchItem(InventoryUpdate):
    product_id: UUIDStr


class InventoryBatchUpdate(StrictModel):
    data: List[InventoryBatchItem] = Field(..., min_length=1)


class InventoryResponse(BaseModel):
    object: str = "inventory"
    id: str
    product_id: str
    product_path: str
    product_sku: str
    onhand: int
    overselling: bool
    created: datetime
    modified: datetime
