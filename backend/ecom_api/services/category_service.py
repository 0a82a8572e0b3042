# backend/ecom_api/services/category_service.py
"""
Servicio del catálogo jerárquico.

Esta clase encapsula las reglas del árbol de categorías:
- El árbol sólo se reemplaza completo, nunca nodo a nodo.
- No se puede reemplazar ni borrar mientras existan relaciones
  producto ↔ categoría (AssocsExist).
- Al leerlo, sólo las hojas llevan la lista de productos asociados.
"""

import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.exceptions import AssocsExist, CategoriesEmpty, CategoryNotFound
from ecom_api.crud import category_crud, product_category_crud
from ecom_api.db.models.category_model import Category
from ecom_api.schemas import category_schema
from ecom_api.utils.nestedset import CategoryNode, build_tree, generate_nested_set, tree_from_dict

logger = logging.getLogger(__name__)


class CategoryService:

    # ========================================
    # OPERACIONES DE CONSULTA
    # ========================================

    async def has_catalog(self, db: AsyncSession) -> bool:
        return await category_crud.has_catalog(db)

    async def get_catalog(self, db: AsyncSession) -> CategoryNode:
        """
        Carga el conjunto anidado y reconstruye el árbol.

        Las hojas reciben su lista de productos (posiblemente vacía); los
        nodos internos no llevan el campo.
        """
        rows = await category_crud.get_categories_ordered(db)
        if not rows:
            raise CategoriesEmpty()
        root = build_tree(rows)
        products = await product_category_crud.products_by_category(db)
        for node in root.preorder():
            if node.is_leaf:
                node.products = products.get(node.id, [])
        return root

    async def get_categories(self, db: AsyncSession) -> List[Category]:
        return await category_crud.get_categories_ordered(db)

    async def get_category(self, db: AsyncSession, category_id: str) -> Category:
        category = await category_crud.get_category(db, category_id)
        if category is None:
            raise CategoryNotFound()
        return category

    async def find_by_path(self, db: AsyncSession, path: str) -> CategoryNode:
        rows = await category_crud.get_categories_ordered(db)
        root = build_tree(rows)
        node = root.find_by_path(path) if root else None
        if node is None:
            raise CategoryNotFound(f"category with path '{path}' not found")
        return node

    # ========================================
    # OPERACIONES DE ESCRITURA
    # ========================================

    async def update_catalog(self, db: AsyncSession, tree_in: category_schema.CategoryTreeIn) -> CategoryNode:
        """
        Reemplaza el árbol completo en una única transacción.

        El árbol de entrada se aplana en pre-orden respetando el orden de los
        hermanos tal y como llegan.
        """
        if await category_crud.has_product_categories(db):
            raise AssocsExist("the catalog cannot be replaced while product to category associations exist")

        root = tree_from_dict(tree_in.model_dump())
        rows = generate_nested_set(root)
        categories = await category_crud.replace_nested_set(db, rows)
        await db.commit()
        logger.info(f"Catálogo reemplazado con {len(categories)} categorías")

        rebuilt = build_tree(categories)
        for node in rebuilt.preorder():
            if node.is_leaf:
                node.products = []
        return rebuilt

    async def delete_catalog(self, db: AsyncSession) -> None:
        if await category_crud.has_product_categories(db):
            raise AssocsExist("the catalog cannot be deleted while product to category associations exist")
        deleted = await category_crud.purge_categories(db)
        await db.commit()
        logger.info(f"Catálogo purgado ({deleted} categorías)")


# Instancia única del servicio
category_service = CategoryService()
