# backend/ecom_api/services/product_service.py

"""
Capa de servicios para operaciones de negocio relacionadas con productos.

Responsabilidades principales:
- Validaciones de unicidad (sku y path)
- Alta de la fila de inventario junto con el producto
- Baja en cascada de precios, inventario, imágenes, relaciones con
  categorías, asociaciones producto ↔ producto y líneas de carrito
- Metadatos de imágenes de producto con prioridad automática
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import ImageNotFound, ProductNotFound, ProductPathExists, ProductSKUExists
from ecom_api.crud import assoc_crud, cart_crud, image_crud, price_crud, product_crud, stock_crud
from ecom_api.crud.product_category_crud import delete_product_categories_for_product
from ecom_api.db.models.product_model import Image, Product
from ecom_api.schemas import image_schema, product_schema

logger = logging.getLogger(__name__)


class ProductService:

    # ========================================
    # PRODUCTOS
    # ========================================

    async def get_product(self, db: AsyncSession, product_id: str) -> Product:
        product = await product_crud.get_product(db, product_id)
        if product is None:
            raise ProductNotFound()
        return product

    async def list_products(self, db: AsyncSession, skip: int = 0, limit: int = 100) -> List[Product]:
        if limit > 1000: # Prevenir consultas excesivamente grandes
            limit = 1000
        return await product_crud.get_products(db, skip=skip, limit=limit)

    async def create_product(self, db: AsyncSession, product_in: product_schema.ProductCreate) -> Product:
        if await product_crud.get_product_by_sku(db, product_in.sku):
            raise ProductSKUExists(f"product with sku '{product_in.sku}' already exists")
        if await product_crud.get_product_by_path(db, product_in.path):
            raise ProductPathExists(f"product with path '{product_in.path}' already exists")

        product = await product_crud.create_product(db, product_in)
        await stock_crud.create_inventory(db, product.id)
        await db.commit()
        logger.info(f"Producto {product.sku} creado ({product.id})")
        return product

    async def update_product(self, db: AsyncSession, product_id: str, product_in: product_schema.ProductUpdate) -> Product:
        product = await self.get_product(db, product_id)
        if product_in.sku != product.sku and await product_crud.get_product_by_sku(db, product_in.sku):
            raise ProductSKUExists(f"product with sku '{product_in.sku}' already exists")
        if product_in.path != product.path and await product_crud.get_product_by_path(db, product_in.path):
            raise ProductPathExists(f"product with path '{product_in.path}' already exists")
        product = await product_crud.update_product(db, product, product_in)
        await db.commit()
        return product

    async def delete_product(self, db: AsyncSession, product_id: str) -> None:
        product = await self.get_product(db, product_id)
        await price_crud.delete_prices_for_product(db, product.id)
        await stock_crud.delete_inventory_for_product(db, product.id)
        await image_crud.delete_images_by_product(db, product.id)
        await delete_product_categories_for_product(db, product.id)
        await assoc_crud.delete_assocs_for_product(db, product.id)
        await cart_crud.delete_cart_items_for_product(db, product.id)
        await product_crud.delete_product(db, product)
        await db.commit()
        logger.info(f"Producto {product.sku} eliminado")

    # ========================================
    # IMÁGENES
    # ========================================

    async def add_image(self, db: AsyncSession, image_in: image_schema.ImageCreate) -> Image:
        await self.get_product(db, image_in.product_id)
        fields = image_in.model_dump()
        if fields["pri"] is None:
            fields["pri"] = await image_crud.next_pri(db, image_in.product_id)
        image = await image_crud.create_image(db, ori=True, up=False, **fields)
        await db.commit()
        return image

    async def get_image(self, db: AsyncSession, image_id: str) -> Image:
        image = await image_crud.get_image(db, image_id)
        if image is None:
            raise ImageNotFound()
        return image

    async def list_product_images(self, db: AsyncSession, product_id: str) -> List[Image]:
        await self.get_product(db, product_id)
        return await image_crud.get_images_by_product(db, product_id)

    async def delete_image(self, db: AsyncSession, image_id: str) -> None:
        image = await self.get_image(db, image_id)
        await image_crud.delete_image(db, image)
        await db.commit()

    async def delete_all_product_images(self, db: AsyncSession, product_id: str) -> None:
        await self.get_product(db, product_id)
        await image_crud.delete_images_by_product(db, product_id)
        await db.commit()


# Instancia única del servicio
product_service = ProductService()
