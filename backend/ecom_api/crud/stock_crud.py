# backend/ecom_api/crud/stock_crud.py
"""
Operaciones CRUD para el inventario por producto.
"""

from typing import List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.product_model import Product
from ecom_api.db.models.stock_model import Inventory


def to_dict(inventory: Inventory, product: Product) -> dict:
    return {
        "object": "inventory",
        "id": inventory.id,
        "product_id": product.id,
        "product_path": product.path,
        "product_sku": product.sku,
        "onhand": inventory.onhand,
        "overselling": inventory.overselling,
        "created": inventory.created,
        "modified": inventory.modified,
    }


async def get_inventory(db: AsyncSession, inventory_id: str) -> Optional[Tuple[Inventory, Product]]:
    result = await db.execute(
        select(Inventory, Product)
        .join(Product, Inventory.product_id == Product.id)
        .filter(Inventory.id == inventory_id)
    )
    return result.first()


async def get_inventory_by_product(db: AsyncSession, product_id: str) -> Optional[Inventory]:
    result = await db.execute(select(Inventory).filter(Inventory.product_id == product_id))
    return result.scalars().first()


async def get_inventories(db: AsyncSession) -> List[Tuple[Inventory, Product]]:
    result = await db.execute(
        select(Inventory, Product).join(Product, Inventory.product_id == Product.id).order_by(Product.sku)
    )
    return list(result.all())


async def create_inventory(db: AsyncSession, product_id: str, onhand: int = 0) -> Inventory:
    db_obj = Inventory(product_id=product_id, onhand=onhand, overselling=False)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_inventory_for_product(db: AsyncSession, product_id: str) -> None:
    await db.execute(delete(Inventory).where(Inventory.product_id == product_id))
