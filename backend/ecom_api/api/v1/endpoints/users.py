# backend/ecom_api/api/v1/endpoints/users.py
"""
Endpoints de usuarios y de sus direcciones.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import user_schema
from ecom_api.schemas.common_schema import ListResponse, UUID_PATTERN
from ecom_api.services.user_service import user_service

logger = logging.getLogger(__name__)

users_router = APIRouter()
addresses_router = APIRouter()

# ========================================
# USUARIOS
# ========================================

@users_router.post("", response_model=user_schema.UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateUser")),
    user_in: user_schema.UserCreate,
):
    """Registro de usuario. Sólo root puede dar de alta administradores."""
    logger.info(f"👤 USUARIO: Alta de {user_in.email} con rol {user_in.role}")
    return await user_service.create_user(db, principal, user_in)


@users_router.get("", response_model=ListResponse[user_schema.UserResponse])
async def list_users(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListUsers")),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    return {"data": await user_service.list_users(db, skip=skip, limit=limit)}


@users_router.get("/{user_id}", response_model=user_schema.UserResponse)
async def get_user(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetUser")),
    user_id: deps.UUIDPath,
):
    return await user_service.get_user(db, principal, user_id)


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteUser")),
    user_id: deps.UUIDPath,
) -> None:
    await user_service.delete_user(db, user_id)
    logger.info(f"👤 USUARIO: Eliminado {user_id}")


# ========================================
# DIRECCIONES
# ========================================

@addresses_router.post("", response_model=user_schema.AddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateAddress")),
    address_in: user_schema.AddressCreate,
):
    return await user_service.create_address(db, principal, address_in)


@addresses_router.get("", response_model=ListResponse[user_schema.AddressResponse])
async def list_addresses(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListAddresses")),
    user_id: str = Query(..., pattern=UUID_PATTERN),
):
    return {"data": await user_service.list_addresses(db, principal, user_id)}


@addresses_router.get("/{address_id}", response_model=user_schema.AddressResponse)
async def get_address(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetAddress")),
    address_id: deps.UUIDPath,
):
    return await user_service.get_address(db, principal, address_id)


@addresses_router.patch("/{address_id}", response_model=user_schema.AddressResponse)
async def update_address(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateAddress")),
    address_id: deps.UUIDPath,
    address_in: user_schema.AddressUpdate,
):
    """Actualización parcial. Sólo addr2 y county se pueden borrar enviando null."""
    return await user_service.update_address(db, principal, address_id, address_in)


@addresses_router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteAddress")),
    address_id: deps.UUIDPath,
) -> None:
    await user_service.delete_address(db, principal, address_id)
