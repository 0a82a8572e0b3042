# backend/ecom_api/api/deps.py
"""
Módulo de dependencias para FastAPI.

Este archivo centraliza las dependencias que se inyectan en los endpoints:
- Sesión de base de datos por petición.
- Configuración.
- authorize(op): verifica el token Bearer y consulta la tabla de
  autorización para la operación indicada.
- UUIDPath: parámetro de ruta validado como UUID v4.
"""

from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ecom_api.core.config import settings
from ecom_api.core.exceptions import Forbidden, Unauthorized
from ecom_api.core.security import Principal, decode_token, is_permitted
from ecom_api.db.database import AsyncSessionLocal
from ecom_api.schemas.common_schema import UUID_PATTERN

bearer_scheme = HTTPBearer(auto_error=False)

UUIDPath = Annotated[str, Path(pattern=UUID_PATTERN)]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependencia de FastAPI para obtener una sesión de base de datos asíncrona.
    Se asegura de que la sesión se cierre siempre después de la petición; lo
    que no se haya confirmado se descarta.
    """
    async with AsyncSessionLocal() as session:
        yield session


def get_settings():
    """
    Dependencia de FastAPI para obtener el objeto de configuración.
    """
    return settings


def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("missing bearer token")
    return decode_token(credentials.credentials)


def authorize(operation: str):
    """Dependencia que exige un token válido con permiso para 'operation'."""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not is_permitted(principal.role, operation):
            raise Forbidden(f"role '{principal.role}' may not perform {operation}")
        return principal

    return dependency
