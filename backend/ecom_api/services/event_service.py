# backend/ecom_api/services/event_service.py
"""
Publicación de eventos de dominio en Google Pub/Sub.

Dos temas lógicos:
- events: un mensaje por evento de dominio, con el atributo 'event'.
- broadcast: un mensaje por (evento, webhook suscrito), con los atributos
  'event' y 'webhook_id'.

Las publicaciones ocurren siempre después del commit de la transacción que
origina el evento. El cliente de publicación se crea de forma perezosa y se
comparte entre peticiones.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from google.api_core.exceptions import AlreadyExists
from google.cloud import pubsub_v1

from ecom_api.core.config import settings
from ecom_api.core.exceptions import EventPublishFailed, EventTypeNotFound

logger = logging.getLogger(__name__)

# Conjunto cerrado de eventos reconocidos
SERVICE_STARTED = "service.started"
USER_CREATED = "user.created"
ADDRESS_CREATED = "address.created"
ADDRESS_UPDATED = "address.updated"
ORDER_CREATED = "order.created"
ORDER_UPDATED = "order.updated"

EVENT_TYPES = frozenset({
    SERVICE_STARTED,
    USER_CREATED,
    ADDRESS_CREATED,
    ADDRESS_UPDATED,
    ORDER_CREATED,
    ORDER_UPDATED,
})


def validate_event_type(event: str) -> None:
    if event not in EVENT_TYPES:
        raise EventTypeNotFound(f"event type '{event}' is not recognized")


class EventService:
    def __init__(self):
        self._publisher = None

    @property
    def enabled(self) -> bool:
        return bool(settings.GOOGLE_PROJECT_ID)

    @property
    def publisher(self) -> pubsub_v1.PublisherClient:
        if self._publisher is None:
            self._publisher = pubsub_v1.PublisherClient()
            logger.info("Cliente de publicación de Pub/Sub inicializado.")
        return self._publisher

    def set_publisher(self, publisher) -> None:
        """Sustituye el cliente de publicación (tests, emuladores)."""
        self._publisher = publisher

    # ========================================
    # PUBLICACIÓN
    # ========================================

    async def publish(self, topic: str, data: bytes, **attributes: str) -> Optional[str]:
        """
        Publica en el tema y espera el id de mensaje asignado por el servidor.

        El futuro del cliente se espera sin bloquear el bucle de eventos; si la
        petición se cancela, la espera se cancela con ella.
        """
        if not self.enabled:
            logger.warning(f"GOOGLE_PROJECT_ID no configurado; no se publica en '{topic}' ({attributes})")
            return None

        topic_path = self.publisher.topic_path(settings.GOOGLE_PROJECT_ID, topic)
        try:
            future = self.publisher.publish(topic_path, data, **attributes)
            message_id = await asyncio.wrap_future(future)
        except Exception as e:
            logger.exception(f"Error publicando en {topic_path}: {e}")
            raise EventPublishFailed(f"failed to publish to {topic}")

        logger.info(f"Publicado mensaje {message_id} en {topic} con atributos {attributes}")
        return message_id

    async def publish_topic_event(self, event: str, payload: Any) -> Optional[str]:
        """Codifica el payload como JSON y lo publica en el tema de eventos."""
        validate_event_type(event)
        data = json.dumps(payload, default=str).encode("utf-8")
        return await self.publish(settings.PUBSUB_EVENTS_TOPIC, data, event=event)

    async def publish_broadcast(self, data: bytes, event: str, webhook_id: str) -> Optional[str]:
        return await self.publish(settings.PUBSUB_BROADCAST_TOPIC, data, event=event, webhook_id=webhook_id)

    # ========================================
    # APROVISIONAMIENTO
    # ========================================

    def ensure_topics_and_subscriptions(self) -> None:
        """
        Crea los temas y las suscripciones push si no existen.

        Las suscripciones entregan en los endpoints push de este servicio,
        autenticados con el token compartido.
        """
        project = settings.GOOGLE_PROJECT_ID
        subscriber = pubsub_v1.SubscriberClient()
        pairs = (
            (settings.PUBSUB_EVENTS_TOPIC, settings.PUBSUB_EVENTS_SUBSCRIPTION, "events"),
            (settings.PUBSUB_BROADCAST_TOPIC, settings.PUBSUB_BROADCAST_SUBSCRIPTION, "broadcast"),
        )
        with subscriber:
            for topic, subscription, callback in pairs:
                topic_path = self.publisher.topic_path(project, topic)
                try:
                    self.publisher.create_topic(request={"name": topic_path})
                    logger.info(f"Tema creado: {topic_path}")
                except AlreadyExists:
                    logger.info(f"El tema {topic_path} ya existe")

                endpoint = f"{settings.APP_ENDPOINT.rstrip('/')}/pubsub/{callback}?token={settings.PUBSUB_PUSH_TOKEN}"
                subscription_path = subscriber.subscription_path(project, subscription)
                try:
                    subscriber.create_subscription(request={
                        "name": subscription_path,
                        "topic": topic_path,
                        "push_config": {"push_endpoint": endpoint},
                        "ack_deadline_seconds": 60,
                    })
                    logger.info(f"Suscripción push creada: {subscription_path}")
                except AlreadyExists:
                    logger.info(f"La suscripción {subscription_path} ya existe")


# Instancia única del servicio
event_service = EventService()
