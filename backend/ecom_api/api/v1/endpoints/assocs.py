# backend/ecom_api/api/v1/endpoints/assocs.py
"""
Endpoints de grupos y asociaciones producto ↔ producto.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import assoc_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.assoc_service import assoc_service

groups_router = APIRouter()
assocs_router = APIRouter()

# ========================================
# GRUPOS
# ========================================

@groups_router.post("", response_model=assoc_schema.PPAssocGroupResponse, status_code=status.HTTP_201_CREATED)
async def create_pp_assoc_group(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreatePPAssocGroup")),
    group_in: assoc_schema.PPAssocGroupCreate,
):
    return await assoc_service.create_group(db, group_in)


@groups_router.get("", response_model=ListResponse[assoc_schema.PPAssocGroupResponse])
async def list_pp_assoc_groups(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListPPAssocGroups")),
):
    return {"data": await assoc_service.list_groups(db)}


@groups_router.get("/{group_id}", response_model=assoc_schema.PPAssocGroupResponse)
async def get_pp_assoc_group(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetPPAssocGroup")),
    group_id: deps.UUIDPath,
):
    return await assoc_service.get_group(db, group_id)


@groups_router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pp_assoc_group(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeletePPAssocGroup")),
    group_id: deps.UUIDPath,
) -> None:
    await assoc_service.delete_group(db, group_id)


# ========================================
# ASOCIACIONES
# ========================================

@assocs_router.get("", response_model=ListResponse[assoc_schema.PPAssocResponse])
async def list_pp_assocs(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListPPAssocs")),
    pp_assoc_group_id: Optional[str] = Query(None, pattern=UUID_PATTERN),
    product_from: Optional[str] = Query(None, pattern=UUID_PATTERN),
):
    return {"data": await assoc_service.list_assocs(db, group_id=pp_assoc_group_id, product_from=product_from)}


@assocs_router.put(":batch-update", response_model=ListResponse[assoc_schema.PPAssocResponse])
async def update_pp_assocs(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdatePPAssocs")),
    batch: assoc_schema.PPAssocsBatchUpdate,
):
    """Reemplaza las asociaciones de un producto dentro de un grupo."""
    return {"data": await assoc_service.batch_update(db, batch)}


@assocs_router.get("/{assoc_id}", response_model=assoc_schema.PPAssocResponse)
async def get_pp_assoc(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetPPAssoc")),
    assoc_id: deps.UUIDPath,
):
    return await assoc_service.get_assoc(db, assoc_id)


@assocs_router.delete("/{assoc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pp_assoc(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeletePPAssoc")),
    assoc_id: deps.UUIDPath,
) -> None:
    await assoc_service.delete_assoc(db, assoc_id)
