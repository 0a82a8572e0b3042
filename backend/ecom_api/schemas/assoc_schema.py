# backend/ecom_api/schemas/assoc_schema.py
"""
Esquemas de las asociaciones producto ↔ producto (relacionados, accesorios,
recambios...) agrupadas por código.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .common_schema import StrictModel, UUIDStr


class PPAssocGroupCreate(StrictModel):
    code: str = Field(..., min_length=1, max_length=32, pattern=r"^[A-Za-z0-9_-]+$")
    name: str = Field(..., min_length=1, max_length=255)


class PPAssocGroupResponse(BaseModel):
    object: str = "pp_assoc_group"
    id: str
    code: str
    name: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


class PPAssocResponse(BaseModel):
    object: str = "pp_assoc"
    id: str
    pp_assoc_group_id: str
    product_from: str
    product_to: str
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


class PPAssocsBatchUpdate(StrictModel):
    """Reemplaza las asociaciones de product_from dentro del grupo."""
    pp_assoc_group_id: UUIDStr
    product_from: UUIDStr
    products_to: List[UUIDStr]
