# backend/ecom_api/crud/user_crud.py
"""
Operaciones CRUD para usuarios y sus direcciones.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.user_model import Address, User

# ========================================
# USUARIOS
# ========================================

async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).filter(User.email == email))
    return result.scalars().first()


async def get_users(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[User]:
    result = await db.execute(select(User).order_by(User.created).offset(skip).limit(limit))
    return list(result.scalars().all())


async def create_user(db: AsyncSession, **fields) -> User:
    db_user = User(**fields)
    db.add(db_user)
    await db.flush()
    return db_user


async def delete_user(db: AsyncSession, db_user: User) -> None:
    await db.delete(db_user)
    await db.flush()


# ========================================
# DIRECCIONES
# ========================================

async def get_address(db: AsyncSession, address_id: str, for_update: bool = False) -> Optional[Address]:
    query = select(Address).filter(Address.id == address_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalars().first()


async def get_addresses_by_user(db: AsyncSession, user_id: str) -> List[Address]:
    result = await db.execute(select(Address).filter(Address.user_id == user_id).order_by(Address.created))
    return list(result.scalars().all())


async def create_address(db: AsyncSession, **fields) -> Address:
    db_address = Address(**fields)
    db.add(db_address)
    await db.flush()
    return db_address


async def delete_address(db: AsyncSession, db_address: Address) -> None:
    await db.delete(db_address)
    await db.flush()
