# backend/ecom_api/crud/webhook_crud.py
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.db.models.webhook_model import Webhook


async def get_webhook(db: AsyncSession, webhook_id: str) -> Optional[Webhook]:
    result = await db.execute(select(Webhook).filter(Webhook.id == webhook_id))
    return result.scalars().first()


async def get_webhook_by_url(db: AsyncSession, url: str) -> Optional[Webhook]:
    result = await db.execute(select(Webhook).filter(Webhook.url == url))
    return result.scalars().first()


async def get_webhooks(db: AsyncSession) -> List[Webhook]:
    result = await db.execute(select(Webhook).order_by(Webhook.created))
    return list(result.scalars().all())


async def get_enabled_webhooks_for_event(db: AsyncSession, event: str) -> List[Webhook]:
    """
    Webhooks habilitados suscritos al evento.

    'events' es una columna JSON, así que el filtro por pertenencia se hace
    en Python para que funcione igual en PostgreSQL y en SQLite.
    """
    result = await db.execute(select(Webhook).filter(Webhook.enabled.is_(True)).order_by(Webhook.created))
    return [w for w in result.scalars().all() if event in (w.events or [])]


async def create_webhook(db: AsyncSession, url: str, events: List[str], signing_key: str) -> Webhook:
    db_obj = Webhook(url=url, events=events, signing_key=signing_key, enabled=True)
    db.add(db_obj)
    await db.flush()
    return db_obj


async def delete_webhook(db: AsyncSession, db_obj: Webhook) -> None:
    await db.delete(db_obj)
    await db.flush()
