# backend/ecom_api/api/v1/api_router.py
"""
Este archivo contiene el router principal para la API versión 1.

Se encarga de registrar todos los routers de la versión 1 con su prefijo.
Las rutas con dos puntos (':by-key', ':batch-update') cuelgan del prefijo
del recurso, por eso los endpoints declaran sus rutas relativas a él.

Los callbacks sin token Bearer (Stripe, Pub/Sub) y /healthz, /config se
montan en la raíz desde main.py con public_router.
"""

from fastapi import APIRouter

# Importación de routers especializados por dominio de negocio
from ecom_api.api.v1.endpoints import (
    assocs,
    callbacks,
    carts,
    categories,
    images,
    inventory,
    orders,
    price_lists,
    prices,
    product_categories,
    products,
    promotions,
    system,
    users,
    webhooks,
)

# ========================================
# CONFIGURACIÓN DEL ROUTER PRINCIPAL V1
# ========================================

api_router_v1 = APIRouter()

# ========================================
# USUARIOS Y DIRECCIONES
# ========================================

api_router_v1.include_router(users.users_router, prefix="/users", tags=["Users"])
api_router_v1.include_router(users.addresses_router, prefix="/addresses", tags=["Addresses"])

# ========================================
# CATÁLOGO
# ========================================

# Árbol de categorías: /categories-tree y /categories
api_router_v1.include_router(categories.router, tags=["Categories"])

api_router_v1.include_router(products.router, prefix="/products", tags=["Products"])
api_router_v1.include_router(images.router, prefix="/images", tags=["Images"])

# Asociaciones producto ↔ categoría hoja
api_router_v1.include_router(
    product_categories.router,
    prefix="/products-categories",
    tags=["Product Categories"]
)

# Asociaciones producto ↔ producto
api_router_v1.include_router(assocs.groups_router, prefix="/products-assocs-groups", tags=["Product Associations"])
api_router_v1.include_router(assocs.assocs_router, prefix="/products-assocs", tags=["Product Associations"])

# ========================================
# PRECIOS, INVENTARIO Y PROMOCIONES
# ========================================

api_router_v1.include_router(price_lists.router, prefix="/price-lists", tags=["Price Lists"])
api_router_v1.include_router(prices.router, prefix="/prices", tags=["Prices"])
api_router_v1.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])

api_router_v1.include_router(promotions.promo_rules_router, prefix="/promo-rules", tags=["Promotions"])
api_router_v1.include_router(promotions.offers_router, prefix="/offers", tags=["Promotions"])
api_router_v1.include_router(promotions.coupons_router, prefix="/coupons", tags=["Promotions"])
api_router_v1.include_router(promotions.shipping_tariffs_router, prefix="/shipping-tariffs", tags=["Shipping"])

# ========================================
# CARRITO Y PEDIDOS
# ========================================

api_router_v1.include_router(carts.carts_router, prefix="/carts", tags=["Cart"])
api_router_v1.include_router(carts.carts_coupons_router, prefix="/carts-coupons", tags=["Cart"])
api_router_v1.include_router(orders.router, prefix="/orders", tags=["Orders"])

# ========================================
# WEBHOOKS Y SISTEMA
# ========================================

api_router_v1.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
api_router_v1.include_router(system.router, tags=["System"])

# ========================================
# RUTAS PÚBLICAS (FUERA DE /api/v1)
# ========================================

public_router = APIRouter()
public_router.include_router(system.public_router, tags=["System"])
public_router.include_router(callbacks.router, tags=["Callbacks"])
