# backend/ecom_api/services/user_service.py
"""
Servicio de usuarios y direcciones.

Los clientes sólo pueden ver y modificar sus propios datos; la comprobación
de propiedad se hace aquí con comparación en tiempo constante. Los eventos
user.created, address.created y address.updated se publican tras el commit.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.config import settings
from ecom_api.core.exceptions import AddressNotFound, Forbidden, PriceListNotFound, UserExists, UserNotFound
from ecom_api.core.security import ROLE_ADMIN, ROLE_ROOT, Principal, ensure_owner
from ecom_api.crud import price_crud, user_crud
from ecom_api.db.models.user_model import Address, User
from ecom_api.schemas import user_schema
from ecom_api.schemas.user_schema import AddressResponse, UserResponse
from ecom_api.services.event_service import ADDRESS_CREATED, ADDRESS_UPDATED, USER_CREATED, event_service

logger = logging.getLogger(__name__)


class UserService:

    # ========================================
    # USUARIOS
    # ========================================

    async def create_user(self, db: AsyncSession, principal: Principal, user_in: user_schema.UserCreate) -> User:
        """
        Alta de usuario. Cualquiera puede registrarse como cliente; sólo root
        puede crear administradores.
        """
        if user_in.role == ROLE_ADMIN and principal.role != ROLE_ROOT:
            raise Forbidden("only root may create admin users")
        if await user_crud.get_user_by_email(db, user_in.email):
            raise UserExists()

        price_list_id = user_in.price_list_id
        if price_list_id is not None:
            if await price_crud.get_price_list(db, price_list_id) is None:
                raise PriceListNotFound()
        else:
            default = await price_crud.get_price_list_by_code(db, settings.DEFAULT_PRICE_LIST_CODE)
            price_list_id = default.id if default else None

        user = await user_crud.create_user(
            db,
            uid=user_in.uid,
            role=user_in.role,
            email=user_in.email,
            firstname=user_in.firstname,
            lastname=user_in.lastname,
            price_list_id=price_list_id,
        )
        await db.commit()
        logger.info(f"Usuario {user.id} creado con rol {user.role}")

        await event_service.publish_topic_event(USER_CREATED, UserResponse.model_validate(user).model_dump(mode="json"))
        return user

    async def ensure_root_user(self, db: AsyncSession, email: Optional[str]) -> Optional[User]:
        """Crea el usuario root al arrancar si aún no existe."""
        if not email:
            return None
        user = await user_crud.get_user_by_email(db, email)
        if user is None:
            user = await user_crud.create_user(db, role=ROLE_ROOT, email=email, firstname="Root", lastname="")
            await db.commit()
            logger.info(f"Usuario root creado para {email}")
        return user

    async def get_user(self, db: AsyncSession, principal: Principal, user_id: str) -> User:
        ensure_owner(principal, user_id)
        user = await user_crud.get_user(db, user_id)
        if user is None:
            raise UserNotFound()
        return user

    async def list_users(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[User]:
        return await user_crud.get_users(db, skip=skip, limit=limit)

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        user = await user_crud.get_user(db, user_id)
        if user is None:
            raise UserNotFound()
        await user_crud.delete_user(db, user)
        await db.commit()

    # ========================================
    # DIRECCIONES
    # ========================================

    async def _owned_address(self, db: AsyncSession, principal: Principal, address_id: str) -> Address:
        address = await user_crud.get_address(db, address_id)
        if address is None:
            raise AddressNotFound()
        ensure_owner(principal, address.user_id)
        return address

    async def create_address(self, db: AsyncSession, principal: Principal, address_in: user_schema.AddressCreate) -> Address:
        ensure_owner(principal, address_in.user_id)
        if await user_crud.get_user(db, address_in.user_id) is None:
            raise UserNotFound()
        fields = address_in.model_dump(mode="json")
        address = await user_crud.create_address(db, **fields)
        await db.commit()

        await event_service.publish_topic_event(ADDRESS_CREATED, AddressResponse.model_validate(address).model_dump(mode="json"))
        return address

    async def get_address(self, db: AsyncSession, principal: Principal, address_id: str) -> Address:
        return await self._owned_address(db, principal, address_id)

    async def list_addresses(self, db: AsyncSession, principal: Principal, user_id: str) -> List[Address]:
        ensure_owner(principal, user_id)
        if await user_crud.get_user(db, user_id) is None:
            raise UserNotFound()
        return await user_crud.get_addresses_by_user(db, user_id)

    async def update_address(self, db: AsyncSession, principal: Principal, address_id: str, address_in: user_schema.AddressUpdate) -> Address:
        address = await self._owned_address(db, principal, address_id)
        for field, value in address_in.model_dump(exclude_unset=True, mode="json").items():
            # Sólo addr2 y county admiten borrarse con null
            if value is None and field not in ("addr2", "county"):
                continue
            setattr(address, field, value)
        await db.commit()

        await event_service.publish_topic_event(ADDRESS_UPDATED, AddressResponse.model_validate(address).model_dump(mode="json"))
        return address

    async def delete_address(self, db: AsyncSession, principal: Principal, address_id: str) -> None:
        address = await self._owned_address(db, principal, address_id)
        await user_crud.delete_address(db, address)
        await db.commit()


# Instancia única del servicio
user_service = UserService()
