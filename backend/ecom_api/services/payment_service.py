# backend/ecom_api/services/payment_service.py
"""
Integración con Stripe a través de la librería oficial.

- create_checkout_session(): crea una sesión de Checkout a partir de las
  líneas de un pedido con StripeClient (transporte httpx asíncrono).
- construct_event(): verifica la cabecera Stripe-Signature de un callback y
  devuelve el evento decodificado.
"""

import json
import logging
from typing import Any, Dict, Optional, Sequence

import stripe

from ecom_api.core.config import settings
from ecom_api.core.exceptions import PaymentGatewayError, StripeSignatureInvalid

logger = logging.getLogger(__name__)

SIGNATURE_TOLERANCE_SECONDS = 300


def unit_amount_inc_vat(unit_price: int, vat_rate: Optional[float] = None) -> int:
    """Importe unitario con IVA que se envía a Stripe."""
    rate = settings.VAT_RATE if vat_rate is None else vat_rate
    return unit_price + round(unit_price * rate)


class PaymentService:
    def __init__(self, http_client: Optional[stripe.HTTPClient] = None):
        # Cliente HTTP de stripe inyectable para pruebas
        self.http_client = http_client

    def _get_http_client(self) -> stripe.HTTPClient:
        if self.http_client is None:
            self.http_client = stripe.HTTPXClient(timeout=settings.STRIPE_TIMEOUT_SECONDS)
        return self.http_client

    def _get_client(self) -> stripe.StripeClient:
        if not settings.STRIPE_SECRET_KEY:
            raise PaymentGatewayError("Stripe secret key is not configured")
        return stripe.StripeClient(
            settings.STRIPE_SECRET_KEY,
            http_client=self._get_http_client(),
            base_addresses={"api": settings.STRIPE_API_BASE.rstrip("/")},
            max_network_retries=settings.STRIPE_MAX_NETWORK_RETRIES,
        )

    # ========================================
    # SESIONES DE CHECKOUT
    # ========================================

    def build_checkout_params(self, order_id: str, currency: str, items: Sequence[dict]) -> Dict[str, Any]:
        line_items = [
            {
                "price_data": {
                    "currency": currency.lower(),
                    "unit_amount": unit_amount_inc_vat(item["unit_price"]),
                    "product_data": {"name": item["sku"], "description": item["name"]},
                },
                "quantity": item["qty"],
            }
            for item in items
        ]
        return {
            "mode": "payment",
            "client_reference_id": order_id,
            "payment_method_types": ["card"],
            "line_items": line_items,
            "metadata": {"order_id": order_id},
            "success_url": settings.STRIPE_SUCCESS_URL,
            "cancel_url": settings.STRIPE_CANCEL_URL,
        }

    async def create_checkout_session(self, order_id: str, currency: str, items: Sequence[dict]) -> Dict[str, Any]:
        """Devuelve {"id", "payment_intent"}; payment_intent puede ser None."""
        client = self._get_client()
        params = self.build_checkout_params(order_id, currency, items)
        try:
            session = await client.v1.checkout.sessions.create_async(params)
        except stripe.StripeError as e:
            logger.error(f"Error de Stripe creando la sesión del pedido {order_id}: "
                         f"{e.http_status} - {e.user_message or e!r}")
            raise PaymentGatewayError(f"Stripe request failed: {type(e).__name__}")

        payment_intent = session.get("payment_intent")
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = payment_intent.id

        logger.info(f"Sesión de Stripe {session.id} creada para el pedido {order_id}")
        return {"id": session.id, "payment_intent": payment_intent}

    # ========================================
    # CALLBACKS FIRMADOS
    # ========================================

    def construct_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Verifica Stripe-Signature ('t=<ts>,v1=<hex>[,v1=...]') con el secreto
        de firma y una tolerancia de cinco minutos.
        """
        secret = settings.STRIPE_SIGNING_SECRET
        if not secret:
            raise StripeSignatureInvalid("Stripe signing secret is not configured")
        if not sig_header:
            raise StripeSignatureInvalid("missing Stripe-Signature header")

        try:
            text = payload.decode("utf-8")
            stripe.WebhookSignature.verify_header(text, sig_header, secret, SIGNATURE_TOLERANCE_SECONDS)
        except UnicodeDecodeError:
            raise StripeSignatureInvalid("payload is not valid UTF-8")
        except stripe.SignatureVerificationError as e:
            raise StripeSignatureInvalid(e.user_message or "signature verification failed")

        try:
            return json.loads(text)
        except ValueError:
            raise StripeSignatureInvalid("payload is not valid JSON")


# Instancia única del servicio
payment_service = PaymentService()
