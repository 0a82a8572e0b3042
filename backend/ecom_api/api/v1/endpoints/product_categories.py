# backend/ecom_api/api/v1/endpoints/product_categories.py
"""
Endpoints de relaciones producto ↔ categoría hoja.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import category_schema
from ecom_api.schemas.common_schema import ListResponse, UUIDStr
from ecom_api.services.product_category_service import product_category_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=category_schema.ProductCategoryResponse, status_code=status.HTTP_201_CREATED)
async def add_product_category(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("AddProductCategory")),
    relation_in: category_schema.ProductCategoryCreate,
):
    """Asocia un producto a una categoría hoja."""
    return await product_category_service.attach(db, relation_in.product_id, relation_in.category_id, relation_in.pri)


@router.get("", response_model=ListResponse[category_schema.ProductCategoryListItem])
async def list_products_categories(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListProductsCategories")),
):
    return {"data": await product_category_service.list_all(db)}


@router.put("", response_model=ListResponse[category_schema.ProductCategoryListItem])
async def update_products_categories(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateProductsCategories")),
    assocs: Dict[str, List[UUIDStr]] = Body(...),
):
    """
    Reescritura en bloque: {path: [product_id, ...]}.

    Cada path mencionado queda exactamente con esos productos, en ese orden.
    Si algún path no existe o no es hoja, o falta algún producto, responde
    409 con el informe completo y no escribe nada.
    """
    logger.info(f"📦 PRODUCTOS-CATEGORÍAS: Reescritura en bloque de {len(assocs)} path(s)")
    await product_category_service.bulk_rewrite(db, assocs)
    return {"data": await product_category_service.list_all(db)}


@router.get(":by-key")
async def get_product_category_relations(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetProductCategoryRelations")),
    key: str = Query("id"),
) -> Dict[str, Any]:
    """Productos agrupados por categoría, con clave id o path."""
    return await product_category_service.list_by_key(db, key)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_product_category_relations(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteAllProductCategoryRelations")),
) -> None:
    await product_category_service.delete_all(db)


@router.get("/{product_category_id}", response_model=category_schema.ProductCategoryResponse)
async def get_product_category(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetProductCategory")),
    product_category_id: deps.UUIDPath,
):
    return await product_category_service.get(db, product_category_id)


@router.delete("/{product_category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_category(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteProductCategory")),
    product_category_id: deps.UUIDPath,
) -> None:
    await product_category_service.detach(db, product_category_id)
