# backend/ecom_api/schemas/image_schema.py
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common_schema import StrictModel, UUIDStr


class ImageCreate(StrictModel):
    """Metadatos de una imagen ya subida al almacenamiento de objetos."""
    product_id: UUIDStr
    path: str = Field(..., min_length=1)
    typ: str = Field("image/jpeg", max_length=16)
    w: int = Field(0, ge=0)
    h: int = Field(0, ge=0)
    pri: Optional[int] = Field(None, ge=1)
    size: int = Field(0, ge=0)
    q: int = Field(100, ge=1, le=100)
    gsurl: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class ImageResponse(BaseModel):
    object: str = "image"
    id: str
    product_id: str
    path: str
    typ: str
    w: int
    h: int
    ori: bool
    up: bool
    pri: int
    size: int
    q: int
    gsurl: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)
