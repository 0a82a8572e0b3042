# backend/ecom_api/core/config.py
"""
Este archivo contiene la configuración de la aplicación.

Todas las claves se leen del entorno o del fichero .env. Las sensibles
(secretos de Stripe, token de push de Pub/Sub, secreto JWT) no tienen
valores por defecto útiles en producción.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Apunta al directorio 'backend/'
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic BaseSettings.
    Variables sensibles desde .env, defaults seguros para el resto.
    """
    # Configuración general del proyecto
    BASE_DIR: Path = BASE_DIR
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Ecom API"
    PROJECT_VERSION: str = "0.1.0"

    # Configuración de la base de datos
    POSTGRES_SERVER: str = "postgres"
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "ecom_db"
    POSTGRES_PORT: str = "5432"
    DATABASE_URL_OVERRIDE: Optional[str] = None
    CREATE_SCHEMA_ON_STARTUP: bool = True

    @property
    def DATABASE_URL(self) -> str:
        """URL de conexión a la base de datos asíncrona."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Autenticación - tokens emitidos por el servicio de identidad
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None

    # Google Pub/Sub - sin proyecto no se publica nada
    GOOGLE_PROJECT_ID: Optional[str] = None
    PUBSUB_EVENTS_TOPIC: str = "ecom-api-events-topic"
    PUBSUB_EVENTS_SUBSCRIPTION: str = "ecom-api-events-subscription"
    PUBSUB_BROADCAST_TOPIC: str = "ecom-api-broadcast-topic"
    PUBSUB_BROADCAST_SUBSCRIPTION: str = "ecom-api-broadcast-subscription"
    PUBSUB_PUSH_TOKEN: str = ""
    PUBSUB_SETUP_ON_STARTUP: bool = False
    APP_ENDPOINT: str = "http://localhost:8000"

    # Stripe - Del .env (sensibles)
    STRIPE_SECRET_KEY: Optional[str] = None
    STRIPE_SIGNING_SECRET: Optional[str] = None
    STRIPE_SUCCESS_URL: str = "http://localhost:3000/checkout/success"
    STRIPE_CANCEL_URL: str = "http://localhost:3000/checkout/cancel"
    STRIPE_API_BASE: str = "https://api.stripe.com"
    STRIPE_TIMEOUT_SECONDS: float = 20.0
    STRIPE_MAX_NETWORK_RETRIES: int = 2

    # Entrega de webhooks salientes
    WEBHOOK_TIMEOUT_SECONDS: float = 5.0

    # Usuario root creado al arrancar si no existe
    ROOT_EMAIL: Optional[str] = None

    # Precios e impuestos
    DEFAULT_PRICE_LIST_CODE: str = "default"
    DEFAULT_CURRENCY: str = "GBP"
    VAT_RATE: float = 0.2
    VAT_TAX_CODE: str = "T20"

    # Logging - Defaults seguros
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Server - Del .env con defaults
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

# Instancia global de la configuración
settings = Settings()
