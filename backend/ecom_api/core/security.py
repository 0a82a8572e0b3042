# backend/ecom_api/core/security.py
"""
Autenticación y autorización.

- Verificación del token Bearer (JWT emitido por el servicio de identidad).
- Tabla estática operación → roles permitidos. 'root' siempre pasa y una
  operación desconocida se deniega.
- Comparaciones en tiempo constante para la propiedad de recursos y para
  el token compartido de los callbacks push de Pub/Sub.
"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

import jwt

from ecom_api.core.config import settings
from ecom_api.core.exceptions import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

ROLE_ROOT = "root"
ROLE_ADMIN = "admin"
ROLE_CUSTOMER = "customer"
ROLE_ANON = "anon"
ROLES = (ROLE_ROOT, ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ANON)


@dataclass(frozen=True)
class Principal:
    """Identidad decodificada del token y adjunta a la petición."""
    role: str
    uid: Optional[str] = None
    claims: Optional[dict] = None


# ========================================
# TABLA DE AUTORIZACIÓN
# ========================================

_ALL = frozenset({ROLE_ADMIN, ROLE_CUSTOMER, ROLE_ANON})
_SIGNED_IN = frozenset({ROLE_ADMIN, ROLE_CUSTOMER})
_ADMIN = frozenset({ROLE_ADMIN})

OPERATIONS = {
    # Usuarios y direcciones
    "CreateUser": _ALL,
    "GetUser": _SIGNED_IN,
    "ListUsers": _ADMIN,
    "DeleteUser": _ADMIN,
    "CreateAddress": _SIGNED_IN,
    "GetAddress": _SIGNED_IN,
    "ListAddresses": _SIGNED_IN,
    "UpdateAddress": _SIGNED_IN,
    "DeleteAddress": _SIGNED_IN,

    # Catálogo
    "UpdateCatalog": _ADMIN,
    "GetCatalog": _ALL,
    "DeleteCatalog": _ADMIN,
    "GetCategories": _ALL,
    "AddProductCategory": _ADMIN,
    "GetProductCategory": _ADMIN,
    "ListProductsCategories": _ADMIN,
    "UpdateProductsCategories": _ADMIN,
    "GetProductCategoryRelations": _ALL,
    "DeleteProductCategory": _ADMIN,
    "DeleteAllProductCategoryRelations": _ADMIN,

    # Productos e imágenes
    "CreateProduct": _ADMIN,
    "GetProduct": _ALL,
    "ListProducts": _ALL,
    "UpdateProduct": _ADMIN,
    "DeleteProduct": _ADMIN,
    "AddImage": _ADMIN,
    "GetImage": _ALL,
    "ListProductImages": _ALL,
    "DeleteImage": _ADMIN,
    "DeleteAllProductImages": _ADMIN,

    # Asociaciones producto ↔ producto
    "CreatePPAssocGroup": _ADMIN,
    "GetPPAssocGroup": _ALL,
    "ListPPAssocGroups": _ALL,
    "DeletePPAssocGroup": _ADMIN,
    "GetPPAssoc": _ALL,
    "ListPPAssocs": _ALL,
    "UpdatePPAssocs": _ADMIN,
    "DeletePPAssoc": _ADMIN,

    # Precios e inventario
    "CreatePriceList": _ADMIN,
    "GetPriceList": _ALL,
    "ListPriceLists": _ADMIN,
    "UpdatePriceList": _ADMIN,
    "DeletePriceList": _ADMIN,
    "GetPrice": _ALL,
    "UpdatePrice": _ADMIN,
    "GetInventory": _ADMIN,
    "ListInventory": _ADMIN,
    "UpdateInventory": _ADMIN,
    "BatchUpdateInventory": _ADMIN,

    # Promociones
    "CreatePromoRule": _ADMIN,
    "GetPromoRule": _ADMIN,
    "ListPromoRules": _ADMIN,
    "DeletePromoRule": _ADMIN,
    "ActivateOffer": _ADMIN,
    "GetOffer": _ALL,
    "ListOffers": _ALL,
    "DeactivateOffer": _ADMIN,
    "CreateCoupon": _ADMIN,
    "GetCoupon": _ADMIN,
    "ListCoupons": _ADMIN,
    "UpdateCoupon": _ADMIN,
    "DeleteCoupon": _ADMIN,
    "CreateShippingTariff": _ADMIN,
    "GetShippingTariff": _ALL,
    "ListShippingTariffs": _ALL,
    "UpdateShippingTariff": _ADMIN,
    "DeleteShippingTariff": _ADMIN,

    # Carritos
    "CreateCart": _ALL,
    "AddToCart": _ALL,
    "GetCartItems": _ALL,
    "UpdateCartItem": _ALL,
    "DeleteCartItem": _ALL,
    "EmptyCartItems": _ALL,
    "ApplyCouponToCart": _ALL,
    "GetCartCoupon": _ALL,
    "ListCartCoupons": _ALL,
    "UnapplyCartCoupon": _ALL,

    # Pedidos
    "PlaceOrder": _ALL,
    "GetOrder": _ALL,
    "ListOrders": _SIGNED_IN,
    "StripeCheckout": _ALL,

    # Webhooks y sistema
    "CreateWebhook": _ADMIN,
    "GetWebhook": _ADMIN,
    "ListWebhooks": _ADMIN,
    "UpdateWebhook": _ADMIN,
    "DeleteWebhook": _ADMIN,
    "SysInfo": frozenset(),
}


def is_permitted(role: str, operation: str) -> bool:
    """Consulta la tabla de autorización. root tiene acceso total."""
    if role == ROLE_ROOT:
        return True
    allowed = OPERATIONS.get(operation)
    if allowed is None:
        logger.warning(f"Operación desconocida '{operation}' denegada")
        return False
    return role in allowed


# ========================================
# VERIFICACIÓN DEL TOKEN
# ========================================

def decode_token(token: str) -> Principal:
    """
    Verifica la firma del token y extrae ecom_role / ecom_uid.

    Los tokens antiguos que sólo llevan 'cuuid' se rechazan.
    """
    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except jwt.PyJWTError as e:
        raise Unauthorized(f"invalid token: {e}")

    role = claims.get("ecom_role")
    if role not in ROLES:
        raise Unauthorized("token is missing a valid ecom_role claim")

    uid = claims.get("ecom_uid")
    if uid is None and "cuuid" in claims:
        raise Unauthorized("token uses the unsupported cuuid claim; ecom_uid is required")
    if role == ROLE_CUSTOMER and not uid:
        raise Unauthorized("customer tokens must carry an ecom_uid claim")
    return Principal(role=role, uid=uid, claims=claims)


def create_token(role: str, uid: Optional[str] = None, **extra) -> str:
    """Emite un token firmado con el secreto local (herramientas y tests)."""
    payload = {"ecom_role": role, **extra}
    if uid is not None:
        payload["ecom_uid"] = uid
    if settings.JWT_AUDIENCE is not None:
        payload.setdefault("aud", settings.JWT_AUDIENCE)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# ========================================
# COMPARACIONES EN TIEMPO CONSTANTE
# ========================================

def constant_time_equals(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def ensure_owner(principal: Principal, owner_id: Optional[str]) -> None:
    """
    Los clientes sólo pueden operar sobre recursos propios.
    root y admin no están sujetos a la comprobación de propiedad.
    """
    if principal.role in (ROLE_ROOT, ROLE_ADMIN):
        return
    if not constant_time_equals(principal.uid, owner_id):
        raise Forbidden("resource belongs to another user")


def check_push_token(token: Optional[str]) -> None:
    """Token compartido de los callbacks push; ausente o distinto → 401."""
    expected = settings.PUBSUB_PUSH_TOKEN
    if not expected or not constant_time_equals(token, expected):
        raise Unauthorized("invalid push token")
