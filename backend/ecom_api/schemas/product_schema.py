# backend/ecom_api/schemas/product_schema.py
"""
Esquemas Pydantic para el modelo Product.

Patrón de esquemas utilizado:
- ProductBase: Propiedades comunes compartidas
- ProductCreate: Para crear nuevos productos (POST)
- ProductUpdate: Para reemplazar productos existentes (PUT)
- ProductResponse: Para respuestas de la API (GET)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .common_schema import StrictModel

PATH_PATTERN = r"^[a-z0-9][a-z0-9-]*$"

# ========================================
# ESQUEMA BASE
# ========================================

class ProductData(BaseModel):
    """Datos estructurados opacos del producto."""
    summary: Optional[str] = None
    description: Optional[str] = None
    specification: Optional[str] = None


class ProductBase(StrictModel):
    """Propiedades comunes compartidas entre esquemas de producto."""
    sku: str = Field(..., min_length=1, max_length=64)
    path: str = Field(..., min_length=1, max_length=255, pattern=PATH_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    data: Optional[ProductData] = None


# ========================================
# ESQUEMAS PARA OPERACIONES
# ========================================

class ProductCreate(ProductBase):
    """Esquema para crear un nuevo producto."""
    pass


class ProductUpdate(ProductBase):
    """Reemplazo completo de un producto existente."""
    pass


# ========================================
# ESQUEMA DE RESPUESTA
# ========================================

class ProductResponse(BaseModel):
    object: str = "product"
    id: str
    sku: str
    path: str
    name: str
    data: Optional[ProductData] = None
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)
