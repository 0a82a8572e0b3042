# backend/ecom_api/api/v1/endpoints/price_lists.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import price_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.pricing_service import pricing_service

router = APIRouter()


@router.post("", response_model=price_schema.PriceListResponse, status_code=status.HTTP_201_CREATED)
async def create_price_list(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreatePriceList")),
    price_list_in: price_schema.PriceListCreate,
):
    return await pricing_service.create_price_list(db, price_list_in)


@router.get("", response_model=ListResponse[price_schema.PriceListResponse])
async def list_price_lists(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListPriceLists")),
):
    return {"data": await pricing_service.list_price_lists(db)}


@router.get("/{price_list_id}", response_model=price_schema.PriceListResponse)
async def get_price_list(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetPriceList")),
    price_list_id: deps.UUIDPath,
):
    return await pricing_service.get_price_list(db, price_list_id)


@router.patch("/{price_list_id}", response_model=price_schema.PriceListResponse)
async def update_price_list(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdatePriceList")),
    price_list_id: deps.UUIDPath,
    price_list_in: price_schema.PriceListUpdate,
):
    return await pricing_service.update_price_list(db, price_list_id, price_list_in)


@router.delete("/{price_list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_price_list(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeletePriceList")),
    price_list_id: deps.UUIDPath,
) -> None:
    await pricing_service.delete_price_list(db, price_list_id)
