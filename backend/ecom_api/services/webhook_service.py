# backend/ecom_api/services/webhook_service.py
"""
Servicio de webhooks: alta y mantenimiento de suscripciones, reparto
(fan-out) de eventos hacia el tema broadcast y entrega firmada por HTTP.

Flujo completo:
1. Un evento de dominio llega al callback push 'events'.
2. broadcast() publica una copia en el tema broadcast por cada webhook
   habilitado y suscrito a ese evento.
3. Cada copia llega al callback push 'broadcast' y dispatch() la entrega
   con un POST firmado con HMAC-SHA256.

La entrega es al menos una vez: un fallo se propaga como WebhookPostFailed
para que Pub/Sub la reintente.
"""

import base64
import hashlib
import hmac
import json
import logging
import secrets
from typing import List, Optional

import base58
import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.config import settings
from ecom_api.core.exceptions import EventTypeNotFound, WebhookExists, WebhookNotFound, WebhookPostFailed
from ecom_api.crud import webhook_crud
from ecom_api.db.models.webhook_model import Webhook
from ecom_api.schemas import webhook_schema
from ecom_api.services.event_service import event_service, validate_event_type

logger = logging.getLogger(__name__)

# Códigos de respuesta que cuentan como entrega confirmada
ACK_STATUS_CODES = frozenset({102, 200, 201, 202, 204})

SIGNATURE_HEADER = "X-Ecom-Hmac-SHA256"


def generate_signing_key() -> str:
    """32 bytes aleatorios codificados en base58."""
    return base58.b58encode(secrets.token_bytes(32)).decode("ascii")


def sign_payload(signing_key: str, payload: bytes) -> str:
    """base64(HMAC_SHA256(signing_key, payload))."""
    digest = hmac.new(signing_key.encode("utf-8"), payload, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def build_payload(message_id: str, event: str, webhook_id: str, data: bytes) -> bytes:
    try:
        body = json.loads(data) if data else None
    except ValueError:
        body = data.decode("utf-8", errors="replace")
    return json.dumps({
        "message_id": message_id,
        "event": event,
        "webhook_id": webhook_id,
        "data": body,
    }).encode("utf-8")


class WebhookService:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        # Transporte HTTP inyectable para pruebas
        self.transport = transport

    # ========================================
    # OPERACIONES CRUD
    # ========================================

    async def create_webhook(self, db: AsyncSession, webhook_in: webhook_schema.WebhookCreate) -> Webhook:
        for event in webhook_in.events:
            validate_event_type(event)
        if await webhook_crud.get_webhook_by_url(db, webhook_in.url):
            raise WebhookExists()
        # Se guardan como conjunto, en el orden en que llegaron
        events = list(dict.fromkeys(webhook_in.events))
        webhook = await webhook_crud.create_webhook(db, url=webhook_in.url, events=events,
                                                    signing_key=generate_signing_key())
        await db.commit()
        logger.info(f"Webhook {webhook.id} creado para {webhook.url} ({events})")
        return webhook

    async def get_webhook(self, db: AsyncSession, webhook_id: str) -> Webhook:
        webhook = await webhook_crud.get_webhook(db, webhook_id)
        if webhook is None:
            raise WebhookNotFound()
        return webhook

    async def list_webhooks(self, db: AsyncSession) -> List[Webhook]:
        return await webhook_crud.get_webhooks(db)

    async def update_webhook(self, db: AsyncSession, webhook_id: str, webhook_in: webhook_schema.WebhookUpdate) -> Webhook:
        webhook = await self.get_webhook(db, webhook_id)
        if webhook_in.events is not None:
            for event in webhook_in.events:
                validate_event_type(event)
            webhook.events = list(dict.fromkeys(webhook_in.events))
        if webhook_in.url is not None and webhook_in.url != webhook.url:
            if await webhook_crud.get_webhook_by_url(db, webhook_in.url):
                raise WebhookExists()
            webhook.url = webhook_in.url
        if webhook_in.enabled is not None:
            webhook.enabled = webhook_in.enabled
        await db.commit()
        return webhook

    async def delete_webhook(self, db: AsyncSession, webhook_id: str) -> None:
        webhook = await self.get_webhook(db, webhook_id)
        await webhook_crud.delete_webhook(db, webhook)
        await db.commit()

    # ========================================
    # FAN-OUT Y ENTREGA
    # ========================================

    async def broadcast(self, db: AsyncSession, event: str, data: bytes) -> int:
        """
        Republica el cuerpo del evento en el tema broadcast, una vez por cada
        webhook habilitado suscrito. Devuelve el número de copias publicadas.
        """
        validate_event_type(event)
        webhooks = await webhook_crud.get_enabled_webhooks_for_event(db, event)
        for webhook in webhooks:
            await event_service.publish_broadcast(data, event=event, webhook_id=webhook.id)
        logger.info(f"Evento '{event}' repartido a {len(webhooks)} webhook(s)")
        return len(webhooks)

    async def dispatch(self, db: AsyncSession, message_id: str, event: str, webhook_id: str, data: bytes) -> Optional[int]:
        """
        Entrega un mensaje broadcast al webhook indicado.

        Devuelve el código HTTP de la respuesta confirmada, o None si el
        webhook está deshabilitado y no se hace el POST.
        """
        webhook = await webhook_crud.get_webhook(db, webhook_id)
        if webhook is None:
            raise WebhookNotFound(f"webhook {webhook_id} not found")
        validate_event_type(event)
        if event not in (webhook.events or []):
            raise EventTypeNotFound(f"webhook {webhook_id} is not subscribed to '{event}'")
        if not webhook.enabled:
            logger.info(f"Webhook {webhook_id} deshabilitado; se descarta el mensaje {message_id}")
            return None

        payload = build_payload(message_id, event, webhook.id, data)
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: sign_payload(webhook.signing_key, payload),
        }
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT_SECONDS, transport=self.transport) as client:
                response = await client.post(webhook.url, content=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"POST a {webhook.url} falló para el mensaje {message_id}: {e!r}")
            raise WebhookPostFailed(f"post to webhook {webhook_id} failed: {e.__class__.__name__}")

        if response.status_code not in ACK_STATUS_CODES:
            logger.warning(f"Webhook {webhook_id} respondió {response.status_code} al mensaje {message_id}")
            raise WebhookPostFailed(f"webhook {webhook_id} responded with status {response.status_code}")

        logger.info(f"Mensaje {message_id} entregado a {webhook.url} ({response.status_code})")
        return response.status_code


# Instancia única del servicio
webhook_service = WebhookService()
