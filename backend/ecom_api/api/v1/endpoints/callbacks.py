# backend/ecom_api/api/v1/endpoints/callbacks.py
"""
Callbacks entrantes sin token Bearer.

- POST /stripe-webhook: autenticado con la cabecera Stripe-Signature.
- POST /pubsub/events y POST /pubsub/broadcast: entregas push de Pub/Sub,
  autenticadas con el token compartido en la query string.

Para Pub/Sub, cualquier respuesta 2xx confirma el mensaje y cualquier otra
provoca un reintento.
"""

import base64
import binascii
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Request, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.exceptions import BadRequest, EventTypeNotFound, Unauthorized, WebhookNotFound
from ecom_api.core.security import check_push_token
from ecom_api.schemas.webhook_schema import PubSubEnvelope
from ecom_api.services.order_service import order_service
from ecom_api.services.payment_service import payment_service
from ecom_api.services.webhook_service import webhook_service

logger = logging.getLogger(__name__)
router = APIRouter()


async def read_push_envelope(request: Request, token: Optional[str]) -> PubSubEnvelope:
    """
    Comprueba el token y sólo después lee el cuerpo: un token malo es 401
    aunque el cuerpo no sea JSON.
    """
    try:
        check_push_token(token)
    except Unauthorized:
        logger.warning("⚠️ PUBSUB: Entrega push rechazada por token inválido")
        raise
    try:
        return PubSubEnvelope.model_validate_json(await request.body())
    except ValidationError as e:
        raise BadRequest(f"invalid push envelope: {e.error_count()} error(s)")


def decode_message_data(envelope: PubSubEnvelope) -> bytes:
    try:
        return base64.b64decode(envelope.message.data, validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("message.data is not valid base64")


# ========================================
# STRIPE
# ========================================

@router.post("/stripe-webhook", status_code=status.HTTP_204_NO_CONTENT)
async def stripe_webhook(
    request: Request,
    db: AsyncSession = Depends(deps.get_db),
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
) -> None:
    """
    Webhook de Stripe. Firma inválida → 400. Sólo se procesa
    checkout.session.completed; el resto de eventos se confirma sin más.
    """
    body = await request.body()
    try:
        event = payment_service.construct_event(body, stripe_signature)
    except BadRequest as e:
        logger.warning(f"⚠️ STRIPE: Firma rechazada: {e.message}")
        raise
    logger.info(f"💳 STRIPE: Evento {event.get('id')} de tipo '{event.get('type')}'")
    await order_service.process_stripe_event(db, event, body)


# ========================================
# PUB/SUB PUSH
# ========================================

@router.post("/pubsub/events", status_code=status.HTTP_204_NO_CONTENT)
async def pubsub_events(
    request: Request,
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
) -> None:
    """Reparte un evento de dominio a los webhooks suscritos."""
    envelope = await read_push_envelope(request, token)
    data = decode_message_data(envelope)
    event = envelope.message.attributes.get("event", "")
    try:
        count = await webhook_service.broadcast(db, event, data)
    except EventTypeNotFound as e:
        # Un evento desconocido no se arregla reintentando
        logger.warning(f"⚠️ PUBSUB: Mensaje {envelope.message.message_id} descartado: {e.message}")
        return
    logger.info(f"📣 PUBSUB: Mensaje {envelope.message.message_id} ('{event}') repartido a {count} webhook(s)")


@router.post("/pubsub/broadcast", status_code=status.HTTP_204_NO_CONTENT)
async def pubsub_broadcast(
    request: Request,
    token: Optional[str] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
) -> None:
    """
    Entrega firmada a un webhook. WebhookPostFailed (409) deja el mensaje sin
    confirmar para que Pub/Sub lo reintente.
    """
    envelope = await read_push_envelope(request, token)
    data = decode_message_data(envelope)
    attributes = envelope.message.attributes
    try:
        await webhook_service.dispatch(
            db,
            message_id=envelope.message.message_id,
            event=attributes.get("event", ""),
            webhook_id=attributes.get("webhook_id", ""),
            data=data,
        )
    except (WebhookNotFound, EventTypeNotFound) as e:
        logger.warning(f"⚠️ PUBSUB: Mensaje {envelope.message.message_id} descartado: {e.message}")
