# backend/ecom_api/api/v1/endpoints/images.py
"""
Endpoints de imágenes de producto (sólo metadatos).
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import image_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.product_service import product_service

router = APIRouter()


@router.post("", response_model=image_schema.ImageResponse, status_code=status.HTTP_201_CREATED)
async def add_image(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("AddImage")),
    image_in: image_schema.ImageCreate,
):
    return await product_service.add_image(db, image_in)


@router.get("", response_model=ListResponse[image_schema.ImageResponse])
async def list_product_images(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListProductImages")),
    product_id: str = Query(..., pattern=UUID_PATTERN),
):
    return {"data": await product_service.list_product_images(db, product_id)}


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_product_images(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteAllProductImages")),
    product_id: str = Query(..., pattern=UUID_PATTERN),
) -> None:
    await product_service.delete_all_product_images(db, product_id)


@router.get("/{image_id}", response_model=image_schema.ImageResponse)
async def get_image(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetImage")),
    image_id: deps.UUIDPath,
):
    return await product_service.get_image(db, image_id)


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteImage")),
    image_id: deps.UUIDPath,
) -> None:
    await product_service.delete_image(db, image_id)
