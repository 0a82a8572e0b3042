# backend/ecom_api/main.py
"""
Punto de entrada principal de la aplicación FastAPI.

Este módulo configura y inicializa la aplicación FastAPI completa:
- Logging con el nivel y formato de la configuración
- Manejadores de excepciones que producen el sobre {status, code, message}
- Registro de routers (API v1 y rutas públicas de callbacks)
- Eventos del ciclo de vida (creación de esquema, usuario root, Pub/Sub)
"""

import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ecom_api.api.v1.api_router import api_router_v1, public_router
from ecom_api.core.config import settings
from ecom_api.core.exceptions import EcomError
from ecom_api.db.database import AsyncSessionLocal, create_schema
from ecom_api.services.event_service import SERVICE_STARTED, event_service
from ecom_api.services.order_service import order_service
from ecom_api.services.user_service import user_service

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

# ========================================
# CONFIGURACIÓN DE LA APLICACIÓN FASTAPI
# ========================================

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    version=settings.PROJECT_VERSION,
    description="API de back-office de comercio electrónico"
)

# ========================================
# MANEJADORES DE EXCEPCIONES
# ========================================

def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": status_code, "code": code, "message": message})


@app.exception_handler(EcomError)
async def ecom_error_handler(request: Request, exc: EcomError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Un parámetro de query que no se puede interpretar es 422; cualquier otro
    fallo de validación (cuerpo, ruta, cabeceras) es 400.
    """
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else first.get("msg", "invalid request")
    if any(error.get("loc", ("",))[0] == "query" for error in errors):
        return error_response(422, "unprocessable", message)
    return error_response(400, "bad-request", message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    codes = {404: "not-found", 405: "method-not-allowed"}
    code = codes.get(exc.status_code, "bad-request" if exc.status_code < 500 else "internal")
    return error_response(exc.status_code, code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Error no controlado en {request.method} {request.url.path}")
    return error_response(500, "internal", "internal server error")


# ========================================
# REGISTRO DE ROUTERS DE LA API
# ========================================

app.include_router(api_router_v1, prefix=settings.API_V1_STR)
app.include_router(public_router)


@app.get("/", tags=["Root"])
async def read_root():
    """Verificación básica de que el servicio responde."""
    return {"message": f"Bienvenido a {settings.PROJECT_NAME} v{settings.PROJECT_VERSION}"}

# ========================================
# EVENTOS DEL CICLO DE VIDA DE LA APLICACIÓN
# ========================================

@app.on_event("startup")
async def startup_event():
    """
    Tareas de inicialización:
    - Crear las tablas que falten (CREATE_SCHEMA_ON_STARTUP)
    - Crear el usuario root si ROOT_EMAIL está definido
    - Sembrar la fila del contador de pedidos
    - Crear temas y suscripciones push de Pub/Sub (PUBSUB_SETUP_ON_STARTUP)
    - Publicar service.started
    """
    if settings.CREATE_SCHEMA_ON_STARTUP:
        await create_schema()
        logger.info("✅ Esquema de base de datos verificado")

    async with AsyncSessionLocal() as db:
        await user_service.ensure_root_user(db, settings.ROOT_EMAIL)
        await order_service.ensure_order_counter(db)

    if not event_service.enabled:
        logger.info("ℹ️  GOOGLE_PROJECT_ID no configurado, no se publicarán eventos")
        return

    if settings.PUBSUB_SETUP_ON_STARTUP:
        # El cliente de administración de Pub/Sub es síncrono
        await asyncio.to_thread(event_service.ensure_topics_and_subscriptions)

    try:
        await event_service.publish_topic_event(SERVICE_STARTED, {
            "project": settings.PROJECT_NAME,
            "version": settings.PROJECT_VERSION,
            "endpoint": settings.APP_ENDPOINT,
        })
    except EcomError as e:
        # No detener la aplicación si falla el aviso de arranque
        logger.error(f"❌ No se pudo publicar {SERVICE_STARTED}: {e.message}")
