# backend/ecom_api/api/v1/endpoints/inventory.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import price_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.inventory_service import inventory_service

router = APIRouter()


@router.get("", response_model=ListResponse[price_schema.InventoryResponse])
async def list_inventory(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListInventory")),
):
    return {"data": await inventory_service.list_inventory(db)}


@router.patch(":batch-update", response_model=ListResponse[price_schema.InventoryResponse])
async def batch_update_inventory(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("BatchUpdateInventory")),
    batch: price_schema.InventoryBatchUpdate,
):
    """Actualiza el stock de varios productos en una sola transacción."""
    return {"data": await inventory_service.batch_update(db, batch)}


@router.get("/{inventory_id}", response_model=price_schema.InventoryResponse)
async def get_inventory(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetInventory")),
    inventory_id: deps.UUIDPath,
):
    return await inventory_service.get_inventory(db, inventory_id)


@router.put("/{inventory_id}", response_model=price_schema.InventoryResponse)
async def update_inventory(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateInventory")),
    inventory_id: deps.UUIDPath,
    update: price_schema.InventoryUpdate,
):
    return await inventory_service.update_inventory(db, inventory_id, update)
