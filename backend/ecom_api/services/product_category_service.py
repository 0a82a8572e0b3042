# backend/ecom_api/services/product_category_service.py
"""
Servicio de relaciones producto ↔ categoría.

Sólo las categorías hoja admiten productos. La reescritura en bloque valida
todo antes de escribir: paths inexistentes, paths que no son hoja y
productos inexistentes se devuelven juntos en un informe de conflicto, sin
escrituras parciales.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import (
    BadRequest,
    CatalogAssocsConflict,
    CategoryNotFound,
    CategoryNotLeaf,
    ProductCategoryExists,
    ProductCategoryNotFound,
    ProductNotFound,
)
from ecom_api.crud import category_crud, product_category_crud, product_crud
from ecom_api.db.models.category_model import ProductCategory
from ecom_api.utils.nestedset import build_tree

logger = logging.getLogger(__name__)


class ProductCategoryService:

    async def attach(self, db: AsyncSession, product_id: str, category_id: str, pri: Optional[int] = None) -> ProductCategory:
        category = await category_crud.get_category(db, category_id)
        if category is None:
            raise CategoryNotFound()
        if await product_crud.get_product(db, product_id) is None:
            raise ProductNotFound()
        if not category.is_leaf:
            raise CategoryNotLeaf(f"category '{category.path}' is not a leaf")
        if await product_category_crud.get_by_pair(db, product_id, category_id):
            raise ProductCategoryExists()

        if pri is None:
            pri = await product_category_crud.next_pri(db, category_id)
        relation = await product_category_crud.create_product_category(db, product_id, category_id, pri)
        await db.commit()
        return relation

    async def get(self, db: AsyncSession, product_category_id: str) -> ProductCategory:
        relation = await product_category_crud.get_product_category(db, product_category_id)
        if relation is None:
            raise ProductCategoryNotFound()
        return relation

    async def detach(self, db: AsyncSession, product_category_id: str) -> None:
        relation = await self.get(db, product_category_id)
        await product_category_crud.delete_product_category(db, relation)
        await db.commit()

    async def list_all(self, db: AsyncSession) -> List[dict]:
        return await product_category_crud.list_joined(db)

    async def list_by_key(self, db: AsyncSession, key: str = "id") -> Dict[str, dict]:
        """
        Agrupa los productos por categoría, con la clave elegida (id o path):
        {clave: {"products": {"object": "list", "data": [...]}}}
        """
        if key == "id":
            grouped = await product_category_crud.products_by_category(db)
        elif key == "path":
            grouped = await product_category_crud.products_by_category_path(db)
        else:
            raise BadRequest("key must be one of id or path")
        return {k: {"products": {"object": "list", "data": v}} for k, v in grouped.items()}

    async def bulk_rewrite(self, db: AsyncSession, assocs: Dict[str, List[str]]) -> None:
        """
        Sustituye atómicamente las relaciones de cada path mencionado.

        Los paths que no aparecen en la petición no se tocan.
        """
        rows = await category_crud.get_categories_ordered(db)
        tree = build_tree(rows)

        missing_paths: List[str] = []
        non_leaf_paths: List[str] = []
        leaf_ids: Dict[str, str] = {}
        for path in assocs:
            node = tree.find_by_path(path) if tree else None
            if node is None:
                missing_paths.append(path)
            elif not node.is_leaf:
                non_leaf_paths.append(path)
            else:
                leaf_ids[path] = node.id

        referenced = list(dict.fromkeys(pid for ids in assocs.values() for pid in ids))
        existing = await product_crud.get_existing_ids(db, referenced)
        missing_products = [pid for pid in referenced if pid not in existing]

        if missing_paths or non_leaf_paths or missing_products:
            raise CatalogAssocsConflict(
                f"missing paths: {missing_paths} non-leaf paths: {non_leaf_paths} "
                f"missing products: {missing_products}",
                data={
                    "missing_paths": missing_paths,
                    "non_leaf_paths": non_leaf_paths,
                    "missing_product_ids": missing_products,
                },
            )

        await product_category_crud.delete_for_categories(db, list(leaf_ids.values()))
        for path, product_ids in assocs.items():
            pri = 0
            for product_id in dict.fromkeys(product_ids):
                pri += product_category_crud.PRI_STEP
                await product_category_crud.create_product_category(db, product_id, leaf_ids[path], pri)
        await db.commit()
        logger.info(f"Relaciones producto-categoría reescritas para {len(assocs)} path(s)")

    async def delete_all(self, db: AsyncSession) -> None:
        deleted = await product_category_crud.delete_all(db)
        await db.commit()
        logger.info(f"Eliminadas {deleted} relaciones producto-categoría")


# Instancia única del servicio
product_category_service = ProductCategoryService()
