# backend/ecom_api/api/v1/endpoints/prices.py
"""
Precios por (producto, lista de precios).

El precio se identifica por la pareja, que viaja en la query string.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import price_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.pricing_service import pricing_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=ListResponse[price_schema.PriceResponse])
async def get_prices(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetPrice")),
    product_id: str = Query(..., pattern=UUID_PATTERN),
    price_list_id: Optional[str] = Query(None, pattern=UUID_PATTERN),
):
    """Precios de un producto; con price_list_id, sólo el de esa lista."""
    if price_list_id is not None:
        return {"data": [await pricing_service.get_price(db, product_id, price_list_id)]}
    return {"data": await pricing_service.list_product_prices(db, product_id)}


@router.put("", response_model=price_schema.PriceResponse)
async def update_price(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdatePrice")),
    product_id: str = Query(..., pattern=UUID_PATTERN),
    price_list_id: str = Query(..., pattern=UUID_PATTERN),
    price_in: price_schema.PriceUpdate,
):
    logger.info(f"💶 PRECIO: {product_id} en la lista {price_list_id} = {price_in.unit_price}")
    return await pricing_service.set_price(db, product_id, price_list_id, price_in.unit_price)
