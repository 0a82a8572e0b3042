# backend/ecom_api/services/assoc_service.py
"""
Grupos y asociaciones producto ↔ producto.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import (
    BadRequest,
    PPAssocGroupContainsAssocs,
    PPAssocGroupExists,
    PPAssocGroupNotFound,
    PPAssocNotFound,
    ProductNotFound,
)
from ecom_api.crud import assoc_crud, product_crud
from ecom_api.db.models.product_model import PPAssoc, PPAssocGroup
from ecom_api.schemas import assoc_schema

logger = logging.getLogger(__name__)


class AssocService:

    # ========================================
    # GRUPOS
    # ========================================

    async def create_group(self, db: AsyncSession, group_in: assoc_schema.PPAssocGroupCreate) -> PPAssocGroup:
        if await assoc_crud.get_group_by_code(db, group_in.code):
            raise PPAssocGroupExists()
        group = await assoc_crud.create_group(db, code=group_in.code, name=group_in.name)
        await db.commit()
        return group

    async def get_group(self, db: AsyncSession, group_id: str) -> PPAssocGroup:
        group = await assoc_crud.get_group(db, group_id)
        if group is None:
            raise PPAssocGroupNotFound()
        return group

    async def list_groups(self, db: AsyncSession) -> List[PPAssocGroup]:
        return await assoc_crud.get_groups(db)

    async def delete_group(self, db: AsyncSession, group_id: str) -> None:
        group = await self.get_group(db, group_id)
        if await assoc_crud.group_has_assocs(db, group.id):
            raise PPAssocGroupContainsAssocs()
        await assoc_crud.delete_group(db, group)
        await db.commit()

    # ========================================
    # ASOCIACIONES
    # ========================================

    async def get_assoc(self, db: AsyncSession, assoc_id: str) -> PPAssoc:
        assoc = await assoc_crud.get_assoc(db, assoc_id)
        if assoc is None:
            raise PPAssocNotFound()
        return assoc

    async def list_assocs(self, db: AsyncSession, group_id: Optional[str] = None, product_from: Optional[str] = None) -> List[PPAssoc]:
        return await assoc_crud.get_assocs(db, group_id=group_id, product_from=product_from)

    async def batch_update(self, db: AsyncSession, batch: assoc_schema.PPAssocsBatchUpdate) -> List[PPAssoc]:
        """
        Sustituye todas las asociaciones de product_from dentro del grupo.
        Todos los productos deben existir; si falta alguno no se escribe nada.
        """
        await self.get_group(db, batch.pp_assoc_group_id)
        products_to = list(dict.fromkeys(batch.products_to))
        if batch.product_from in products_to:
            raise BadRequest("a product cannot be associated with itself")

        wanted = [batch.product_from, *products_to]
        existing = await product_crud.get_existing_ids(db, wanted)
        missing = [pid for pid in wanted if pid not in existing]
        if missing:
            raise ProductNotFound(f"products not found: {missing}")

        assocs = await assoc_crud.replace_assocs(db, batch.pp_assoc_group_id, batch.product_from, products_to)
        await db.commit()
        logger.info(f"{len(assocs)} asociación(es) de {batch.product_from} en el grupo {batch.pp_assoc_group_id}")
        return assocs

    async def delete_assoc(self, db: AsyncSession, assoc_id: str) -> None:
        assoc = await self.get_assoc(db, assoc_id)
        await assoc_crud.delete_assoc(db, assoc)
        await db.commit()


# Instancia única del servicio
assoc_service = AssocService()
