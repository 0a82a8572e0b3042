# backend/ecom_api/services/inventory_service.py
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import InventoryNotFound, ProductNotFound
from ecom_api.crud import product_crud, stock_crud
from ecom_api.schemas import price_schema

logger = logging.getLogger(__name__)


class InventoryService:

    async def get_inventory(self, db: AsyncSession, inventory_id: str) -> dict:
        row = await stock_crud.get_inventory(db, inventory_id)
        if row is None:
            raise InventoryNotFound()
        return stock_crud.to_dict(*row)

    async def list_inventory(self, db: AsyncSession) -> List[dict]:
        return [stock_crud.to_dict(inv, product) for inv, product in await stock_crud.get_inventories(db)]

    async def update_inventory(self, db: AsyncSession, inventory_id: str, update: price_schema.InventoryUpdate) -> dict:
        row = await stock_crud.get_inventory(db, inventory_id)
        if row is None:
            raise InventoryNotFound()
        inventory, product = row
        inventory.onhand = update.onhand
        if update.overselling is not None:
            inventory.overselling = update.overselling
        await db.commit()
        return stock_crud.to_dict(inventory, product)

    async def batch_update(self, db: AsyncSession, batch: price_schema.InventoryBatchUpdate) -> List[dict]:
        """Actualiza varios productos en una única transacción; todo o nada."""
        ids = [item.product_id for item in batch.data]
        existing = await product_crud.get_existing_ids(db, ids)
        missing = [pid for pid in ids if pid not in existing]
        if missing:
            raise ProductNotFound(f"products not found: {missing}")

        for item in batch.data:
            inventory = await stock_crud.get_inventory_by_product(db, item.product_id)
            if inventory is None:
                inventory = await stock_crud.create_inventory(db, item.product_id)
            inventory.onhand = item.onhand
            if item.overselling is not None:
                inventory.overselling = item.overselling
        await db.commit()
        logger.info(f"Inventario actualizado para {len(batch.data)} producto(s)")
        return await self.list_inventory(db)


# Instancia única del servicio
inventory_service = InventoryService()
