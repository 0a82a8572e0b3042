# backend/ecom_api/core/exceptions.py
"""
Taxonomía de errores de dominio.

Cada fallo con nombre es una subclase de EcomError con un estado HTTP y un
código fijo con el formato 'area/nombre-en-kebab'. Las capas CRUD y de
servicio lanzan estas excepciones; main.py las traduce a la respuesta
{status, code, message} con un único manejador.
"""

from typing import Any, Optional


class EcomError(Exception):
    status_code: int = 500
    code: str = "internal"
    message: str = "internal server error"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.message
        self.data = data
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"status": self.status_code, "code": self.code, "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        return body


class NotFound(EcomError):
    status_code = 404


class Conflict(EcomError):
    status_code = 409


# ========================================
# ERRORES GENÉRICOS
# ========================================

class BadRequest(EcomError):
    status_code = 400
    code = "bad-request"
    message = "bad request"


class Unauthorized(EcomError):
    status_code = 401
    code = "auth/unauthorized"
    message = "missing or invalid credentials"


class Forbidden(EcomError):
    status_code = 403
    code = "auth/forbidden"
    message = "operation not permitted for this role"


class Internal(EcomError):
    pass


# ========================================
# CATÁLOGO Y ASOCIACIONES
# ========================================

class CategoriesEmpty(NotFound):
    code = "categories/categories-empty"
    message = "the catalog contains no categories"


class CategoryNotFound(NotFound):
    code = "categories/category-not-found"
    message = "category not found"


class CategoryNotLeaf(Conflict):
    code = "categories/category-not-leaf"
    message = "products can only be attached to leaf categories"


class AssocsExist(Conflict):
    code = "categories/assocs-exist"
    message = "product to category associations exist; delete them first"


class CatalogAssocsConflict(Conflict):
    code = "products-categories/missing-paths-leafs-products"
    message = "bulk rewrite refers to missing paths, non-leaf paths or missing products"


class ProductCategoryExists(Conflict):
    code = "products-categories/product-category-exists"
    message = "product is already attached to this category"


class ProductCategoryNotFound(NotFound):
    code = "products-categories/product-category-not-found"
    message = "product to category association not found"


class ProductNotFound(NotFound):
    code = "products/product-not-found"
    message = "product not found"


class ProductSKUExists(Conflict):
    code = "products/product-sku-exists"
    message = "a product with this sku already exists"


class ProductPathExists(Conflict):
    code = "products/product-path-exists"
    message = "a product with this path already exists"


class ImageNotFound(NotFound):
    code = "images/image-not-found"
    message = "image not found"


class PPAssocGroupNotFound(NotFound):
    code = "products-assocs-groups/pp-assoc-group-not-found"
    message = "product to product association group not found"


class PPAssocGroupExists(Conflict):
    code = "products-assocs-groups/pp-assoc-group-exists"
    message = "a product to product association group with this code already exists"


class PPAssocGroupContainsAssocs(Conflict):
    code = "products-assocs-groups/pp-assoc-group-contains-assocs"
    message = "product to product association group still contains associations"


class PPAssocNotFound(NotFound):
    code = "products-assocs/pp-assoc-not-found"
    message = "product to product association not found"


# ========================================
# PRECIOS E INVENTARIO
# ========================================

class PriceListNotFound(NotFound):
    code = "price-lists/price-list-not-found"
    message = "price list not found"


class PriceListCodeExists(Conflict):
    code = "price-lists/price-list-code-exists"
    message = "a price list with this code already exists"


class PriceListInUse(Conflict):
    code = "price-lists/price-list-in-use"
    message = "price list is referenced by prices or users"


class DefaultPriceListMissing(Conflict):
    code = "price-lists/default-price-list-missing"
    message = "the default price list is missing"


class PriceNotFound(NotFound):
    code = "prices/price-not-found"
    message = "price not found"


class InventoryNotFound(NotFound):
    code = "inventory/inventory-not-found"
    message = "inventory not found"


# ========================================
# PROMOCIONES, OFERTAS Y CUPONES
# ========================================

class PromoRuleNotFound(NotFound):
    code = "promo-rules/promo-rule-not-found"
    message = "promo rule not found"


class PromoRuleExists(Conflict):
    code = "promo-rules/promo-rule-exists"
    message = "a promo rule with this code already exists"


class OfferNotFound(NotFound):
    code = "offers/offer-not-found"
    message = "offer not found"


class OfferExists(Conflict):
    code = "offers/offer-exists"
    message = "an offer for this promo rule is already active"


class CouponNotFound(NotFound):
    code = "coupons/coupon-not-found"
    message = "coupon not found"


class CouponExists(Conflict):
    code = "coupons/coupon-exists"
    message = "a coupon with this code already exists"


class CouponInUse(Conflict):
    code = "coupons/coupon-in-use"
    message = "coupon is attached to one or more carts"


class CouponNotAtStartDate(Conflict):
    code = "coupons/coupon-not-at-start-date"
    message = "coupon is not yet valid"


class CouponExpired(Conflict):
    code = "coupons/coupon-expired"
    message = "coupon has expired"


class CouponVoid(Conflict):
    code = "coupons/coupon-void"
    message = "coupon has been voided"


class CouponUsed(Conflict):
    code = "coupons/coupon-used"
    message = "coupon has already been used"


class ShippingTariffNotFound(NotFound):
    code = "shipping-tariffs/shipping-tariff-not-found"
    message = "shipping tariff not found"


class ShippingTariffCodeExists(Conflict):
    code = "shipping-tariffs/shipping-tariff-code-exists"
    message = "a shipping tariff with this shipping code already exists"


# ========================================
# CARRITOS
# ========================================

class CartNotFound(NotFound):
    code = "carts/cart-not-found"
    message = "cart not found"


class CartItemExists(Conflict):
    code = "carts/cart-item-exists"
    message = "product is already in the cart"


class CartItemNotFound(NotFound):
    code = "carts/cart-item-not-found"
    message = "cart item not found"


class CartContainsNoItems(Conflict):
    code = "carts/cart-contains-no-items"
    message = "cart contains no items"


class CartEmpty(Conflict):
    code = "orders/cart-empty"
    message = "cannot place an order for an empty cart"


class CartCouponExists(Conflict):
    code = "carts-coupons/cart-coupon-exists"
    message = "coupon is already applied to this cart"


class CartCouponNotFound(NotFound):
    code = "carts-coupons/cart-coupon-not-found"
    message = "cart coupon not found"


# ========================================
# USUARIOS, PEDIDOS Y PAGOS
# ========================================

class UserNotFound(NotFound):
    code = "users/user-not-found"
    message = "user not found"


class UserExists(Conflict):
    code = "users/user-exists"
    message = "a user with this email already exists"


class AddressNotFound(NotFound):
    code = "addresses/address-not-found"
    message = "address not found"


class OrderNotFound(NotFound):
    code = "orders/order-not-found"
    message = "order not found"


class OrderItemsNotFound(NotFound):
    code = "orders/order-items-not-found"
    message = "order has no items"


class StripeSignatureInvalid(BadRequest):
    code = "stripe/signature-invalid"
    message = "invalid Stripe signature"


class PaymentGatewayError(EcomError):
    status_code = 502
    code = "orders/payment-gateway-error"
    message = "the card processor rejected the checkout request"


class OrderCounterMissing(Internal):
    code = "orders/order-counter-missing"
    message = "the order counter has not been initialised"


# ========================================
# WEBHOOKS Y EVENTOS
# ========================================

class WebhookNotFound(NotFound):
    code = "webhooks/webhook-not-found"
    message = "webhook not found"


class WebhookExists(Conflict):
    code = "webhooks/webhook-exists"
    message = "a webhook with this url already exists"


class EventTypeNotFound(BadRequest):
    code = "webhooks/event-type-not-found"
    message = "unknown event type"


class WebhookPostFailed(Conflict):
    code = "webhooks/webhook-post-failed"
    message = "webhook delivery failed"


class EventPublishFailed(Internal):
    code = "events/publish-failed"
    message = "failed to publish event"
