# backend/ecom_api/db/database.py

"""
Configuración principal de la base de datos para la aplicación.

Este módulo establece la conexión con PostgreSQL usando SQLAlchemy y define
los componentes básicos que serán utilizados por toda la aplicación:
- Motor de base de datos (engine)
- Fábrica de sesiones (AsyncSessionLocal)
- Clase base para modelos (Base)
- Tipos y helpers de columna compartidos por todos los modelos

La dependencia get_db() vive en ecom_api/api/deps.py.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from ecom_api.core.config import settings # Importamos nuestra configuración

# Crear el motor de base de datos asíncrono
engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)

# Crear un sessionmaker asíncrono
# expire_on_commit=False es importante para que los objetos sigan siendo utilizables
# después de que la transacción se haya confirmado.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Clase base declarativa para todos los modelos ORM
Base = declarative_base()

# JSONB en PostgreSQL, JSON genérico en el resto (SQLite en tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def new_uuid() -> str:
    """Identificador estable de entidad: UUID v4 en minúsculas (36 caracteres)."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite devuelve datetimes sin zona; se asume UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def create_schema(bind=None) -> None:
    """Crea las tablas que falten. Se usa al arrancar y en los tests."""
    # Importar los modelos registra las tablas en Base.metadata
    from ecom_api.db.models import (  # noqa: F401
        cart_model,
        category_model,
        order_model,
        price_model,
        product_model,
        promo_model,
        shipping_model,
        stock_model,
        user_model,
        webhook_model,
    )

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
