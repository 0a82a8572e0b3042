# backend/ecom_api/api/v1/endpoints/webhooks.py
"""
Endpoints de administración de webhooks salientes.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.api import deps
from ecom_api.core.security import Principal
from ecom_api.schemas import webhook_schema
from ecom_api.schemas.common_schema import ListResponse
from ecom_api.services.webhook_service import webhook_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=webhook_schema.WebhookResponse, status_code=status.HTTP_201_CREATED)
async def create_webhook(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("CreateWebhook")),
    webhook_in: webhook_schema.WebhookCreate,
):
    """
    Registra un webhook. La respuesta incluye la clave de firma con la que se
    calcula la cabecera X-Ecom-Hmac-SHA256 de cada entrega.
    """
    logger.info(f"🪝 WEBHOOK: Registrando {webhook_in.url} para {webhook_in.events}")
    return await webhook_service.create_webhook(db, webhook_in)


@router.get("", response_model=ListResponse[webhook_schema.WebhookResponse])
async def list_webhooks(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("ListWebhooks")),
):
    return {"data": await webhook_service.list_webhooks(db)}


@router.get("/{webhook_id}", response_model=webhook_schema.WebhookResponse)
async def get_webhook(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("GetWebhook")),
    webhook_id: deps.UUIDPath,
):
    return await webhook_service.get_webhook(db, webhook_id)


@router.patch("/{webhook_id}", response_model=webhook_schema.WebhookResponse)
async def update_webhook(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("UpdateWebhook")),
    webhook_id: deps.UUIDPath,
    webhook_in: webhook_schema.WebhookUpdate,
):
    return await webhook_service.update_webhook(db, webhook_id, webhook_in)


@router.delete("/{webhook_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_webhook(
    *,
    db: AsyncSession = Depends(deps.get_db),
    principal: Principal = Depends(deps.authorize("DeleteWebhook")),
    webhook_id: deps.UUIDPath,
) -> None:
    await webhook_service.delete_webhook(db, webhook_id)
