# backend/ecom_api/api/v1/endpoints/categories.py
"""
Endpoints del árbol de categorías.

El árbol sólo se modifica entero: PUT /categories-tree lo reemplaza y
DELETE /categories-tree lo purga, ambos rechazados mientras existan
relaciones producto ↔ categoría.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import category_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.category_service import category_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.put("/categories-tree", status_code=status.HTTP_200_OK)
async def update_catalog(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateCatalog")),
    tree_in: category_schema.CategoryTreeIn,
) -> Dict[str, Any]:
    """Reemplaza el árbol completo de categorías."""
    logger.info(f"🌳 CATÁLOGO: Reemplazando árbol con raíz '{tree_in.segment}'")
    root = await category_service.update_catalog(db, tree_in)
    return {"object": "category_tree", **root.to_dict()}


@router.get("/categories-tree")
async def get_catalog(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetCatalog")),
) -> Dict[str, Any]:
    """Árbol de categorías; las hojas incluyen sus productos."""
    root = await category_service.get_catalog(db)
    return {"object": "category_tree", **root.to_dict()}


@router.delete("/categories-tree", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catalog(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteCatalog")),
) -> None:
    logger.info("🗑️ CATÁLOGO: Purgando el árbol de categorías")
    await category_service.delete_catalog(db)


@router.get("/categories", response_model=ListResponse[category_schema.CategoryResponse])
async def list_categories(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetCategories")),
):
    """Lista plana de categorías en pre-orden (por lft)."""
    categories = await category_service.get_categories(db)
    return {"data": categories}
