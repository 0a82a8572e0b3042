# backend/ecom_api/schemas/category_schema.py

"""
Esquemas Pydantic del catálogo.

- CategoryTreeIn: árbol completo que reemplaza el catálogo (PUT).
  Los hijos viajan en 'categories'; se acepta 'children' como alias.
- CategoryResponse: fila plana del conjunto anidado.
- ProductCategory*: relaciones producto ↔ categoría hoja.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .common_schema import StrictModel, UUIDStr

SEGMENT_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"

# ========================================
# ÁRBOL DE CATEGORÍAS
# ========================================

class CategoryTreeIn(StrictModel):
    """Nodo del árbol de entrada. Los segmentos deben ser únicos entre hermanos."""
    segment: str = Field(..., min_length=1, max_length=64, pattern=SEGMENT_PATTERN)
    name: str = Field(..., min_length=1, max_length=255)
    categories: List["CategoryTreeIn"] = Field(
        default_factory=list,
        validation_alias=AliasChoices("categories", "children"),
    )

    @field_validator("categories")
    @classmethod
    def unique_sibling_segments(cls, v):
        seen = set()
        for child in v:
            if child.segment in seen:
                raise ValueError(f"duplicate sibling segment '{child.segment}'")
            seen.add(child.segment)
        return v


CategoryTreeIn.model_rebuild()


class CategoryResponse(BaseModel):
    """Categoría plana, tal y como está almacenada."""
    object: str = "category"
    id: str
    segment: str
    path: str
    name: str
    lft: int
    rgt: int
    depth: int
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


# ========================================
# RELACIONES PRODUCTO ↔ CATEGORÍA
# ========================================

class ProductCategoryCreate(StrictModel):
    product_id: UUIDStr
    category_id: UUIDStr
    pri: Optional[int] = Field(None, ge=1)


class ProductCategoryResponse(BaseModel):
    object: str = "product_category"
    id: str
    product_id: str
    category_id: str
    pri: int
    created: datetime
    modified: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductCategoryListItem(BaseModel):
    """Relación desnormalizada con los datos de producto y categoría."""
    object: str = "product_category"
    id: str
    product_id: str
    product_path: str
    product_sku: str
    product_name: str
    category_id: str
    category_path: str
    pri: int
    created: datetime
    modified: datetime
