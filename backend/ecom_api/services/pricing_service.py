# backend/ecom_api/services/pricing_service.py
"""
Listas de precios, precios y resolución del precio unitario.

resolve() devuelve (unit_price, currency, tax_code) para un producto en una
lista de precios. Si no se indica lista se usa la lista por defecto del
sistema (código DEFAULT_PRICE_LIST_CODE); si no existe, el fallo es
DefaultPriceListMissing.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.config import settings
from ecom_api.core.exceptions import (
    DefaultPriceListMissing,
    PriceListCodeExists,
    PriceListInUse,
    PriceListNotFound,
    PriceNotFound,
    ProductNotFound,
)
from ecom_api.crud import price_crud, product_crud
from ecom_api.db.models.price_model import Price, PriceList
from ecom_api.schemas import price_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPrice:
    product_id: str
    price_list_id: str
    unit_price: int
    currency: str
    tax_code: str


class PricingService:

    # ========================================
    # RESOLUCIÓN DE PRECIOS
    # ========================================

    async def get_default_price_list(self, db: AsyncSession) -> PriceList:
        price_list = await price_crud.get_price_list_by_code(db, settings.DEFAULT_PRICE_LIST_CODE)
        if price_list is None:
            raise DefaultPriceListMissing()
        return price_list

    async def resolve(self, db: AsyncSession, product_id: str, price_list_id: Optional[str] = None) -> ResolvedPrice:
        """
        Precio unitario de un producto en una lista de precios.

        La pareja (producto, lista) es única, así que el resultado es
        determinista: una sola fila o ninguna.
        """
        if price_list_id is None:
            price_list = await self.get_default_price_list(db)
        else:
            price_list = await price_crud.get_price_list(db, price_list_id)
            if price_list is None:
                raise PriceListNotFound()

        price = await price_crud.get_price(db, product_id, price_list.id)
        if price is None:
            raise PriceNotFound(f"no price for product {product_id} in price list '{price_list.code}'")
        return ResolvedPrice(
            product_id=product_id,
            price_list_id=price_list.id,
            unit_price=price.unit_price,
            currency=price_list.currency_code,
            tax_code=settings.VAT_TAX_CODE,
        )

    # ========================================
    # LISTAS DE PRECIOS
    # ========================================

    async def create_price_list(self, db: AsyncSession, price_list_in: price_schema.PriceListCreate) -> PriceList:
        if await price_crud.get_price_list_by_code(db, price_list_in.code):
            raise PriceListCodeExists(f"price list code '{price_list_in.code}' is already taken")
        price_list = await price_crud.create_price_list(db, **price_list_in.model_dump())
        await db.commit()
        return price_list

    async def get_price_list(self, db: AsyncSession, price_list_id: str) -> PriceList:
        price_list = await price_crud.get_price_list(db, price_list_id)
        if price_list is None:
            raise PriceListNotFound()
        return price_list

    async def list_price_lists(self, db: AsyncSession) -> List[PriceList]:
        return await price_crud.get_price_lists(db)

    async def update_price_list(self, db: AsyncSession, price_list_id: str, price_list_in: price_schema.PriceListUpdate) -> PriceList:
        price_list = await self.get_price_list(db, price_list_id)
        changes = price_list_in.model_dump(exclude_unset=True)
        new_code = changes.get("code")
        if new_code and new_code != price_list.code and await price_crud.get_price_list_by_code(db, new_code):
            raise PriceListCodeExists(f"price list code '{new_code}' is already taken")
        for field, value in changes.items():
            if value is not None:
                setattr(price_list, field, value)
        await db.commit()
        return price_list

    async def delete_price_list(self, db: AsyncSession, price_list_id: str) -> None:
        price_list = await self.get_price_list(db, price_list_id)
        if await price_crud.price_list_in_use(db, price_list.id):
            raise PriceListInUse()
        await price_crud.delete_price_list(db, price_list)
        await db.commit()

    # ========================================
    # PRECIOS
    # ========================================

    async def get_price(self, db: AsyncSession, product_id: str, price_list_id: str) -> Price:
        price = await price_crud.get_price(db, product_id, price_list_id)
        if price is None:
            raise PriceNotFound()
        return price

    async def list_product_prices(self, db: AsyncSession, product_id: str) -> List[Price]:
        if await product_crud.get_product(db, product_id) is None:
            raise ProductNotFound()
        return await price_crud.get_prices_by_product(db, product_id)

    async def set_price(self, db: AsyncSession, product_id: str, price_list_id: str, unit_price: int) -> Price:
        if await product_crud.get_product(db, product_id) is None:
            raise ProductNotFound()
        await self.get_price_list(db, price_list_id)
        price = await price_crud.upsert_price(db, product_id, price_list_id, unit_price)
        await db.commit()
        return price


# Instancia única del servicio
pricing_service = PricingService()
