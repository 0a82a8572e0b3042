# backend/ecom_api/api/v1/endpoints/products.py

"""
Endpoints REST para operaciones CRUD de productos.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import product_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.product_service import product_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=product_schema.ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateProduct")),
    product_in: product_schema.ProductCreate,
):
    """Crea un nuevo producto en el catálogo."""
    logger.info(f"🆕 PRODUCTO: Creando producto con SKU '{product_in.sku}'")
    product = await product_service.create_product(db, product_in)
    logger.info(f"✅ PRODUCTO: Creado exitosamente SKU '{product.sku}' ({product.id})")
    return product


@router.put("/{product_id}", response_model=product_schema.ProductResponse)
async def update_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateProduct")),
    product_id: deps.UUIDPath,
    product_in: product_schema.ProductUpdate,
):
    """Reemplaza un producto existente."""
    logger.info(f"🔄 PRODUCTO: Actualizando producto {product_id}")
    return await product_service.update_product(db, product_id, product_in)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteProduct")),
    product_id: deps.UUIDPath,
) -> None:
    """Elimina un producto y todo lo que cuelga de él."""
    logger.info(f"🗑️ PRODUCTO: Eliminando producto {product_id}")
    await product_service.delete_product(db, product_id)


@router.get("/{product_id}", response_model=product_schema.ProductResponse)
async def read_product(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetProduct")),
    product_id: deps.UUIDPath,
):
    return await product_service.get_product(db, product_id)


@router.get("", response_model=ListResponse[product_schema.ProductResponse])
async def read_products(
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListProducts")),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=200),
):
    """Obtiene una lista paginada de productos."""
    return {"data": await product_service.list_products(db, skip=skip, limit=limit)}
