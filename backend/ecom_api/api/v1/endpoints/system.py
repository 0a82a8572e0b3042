# backend/ecom_api/api/v1/endpoints/system.py
"""
Endpoints de sistema: salud, configuración pública e información interna.
"""

from fastapi import APIRouter, Depends

from ecom_api.api import deps
from ecom_api.core.config import Settings
from ecom_api.core.security import Principal
from ecom_api.services.event_service import event_service

# Sin token, montado en la raíz
public_router = APIRouter()
# Bajo /api/v1, sólo root
router = APIRouter()


@public_router.get("/healthz")
async def healthz():
    return {"status": "ok"}


@public_router.get("/config")
async def public_config(settings: Settings = Depends(deps.get_settings)):
    """Configuración que el frontend puede conocer. Nunca incluye secretos."""
    return {
        "object": "config",
        "project": settings.PROJECT_NAME,
        "version": settings.PROJECT_VERSION,
        "currency": settings.DEFAULT_CURRENCY,
        "stripe_enabled": bool(settings.STRIPE_SECRET_KEY),
        "pubsub_enabled": event_service.enabled,
        "topics": {
            "events": settings.PUBSUB_EVENTS_TOPIC,
            "broadcast": settings.PUBSUB_BROADCAST_TOPIC,
        },
    }


@router.get("/sysinfo")
async def sysinfo(
    settings: Settings = Depends(deps.get_settings),
    principal: Principal = Depends(deps.authorize("SysInfo")),
):
    return {
        "object": "sysinfo",
        "version": settings.PROJECT_VERSION,
        "api": settings.API_V1_STR,
        "endpoint": settings.APP_ENDPOINT,
        "google_project_id": settings.GOOGLE_PROJECT_ID,
        "pubsub": {
            "enabled": event_service.enabled,
            "events_topic": settings.PUBSUB_EVENTS_TOPIC,
            "events_subscription": settings.PUBSUB_EVENTS_SUBSCRIPTION,
            "broadcast_topic": settings.PUBSUB_BROADCAST_TOPIC,
            "broadcast_subscription": settings.PUBSUB_BROADCAST_SUBSCRIPTION,
        },
    }
