# backend/tests/conftest.py
"""
Fixtures compartidas.

Cada test recibe una base de datos SQLite en memoria nueva, un cliente HTTP
contra la aplicación ASGI y un publicador de Pub/Sub falso que guarda los
mensajes en lugar de enviarlos.
"""

import os

# Debe fijarse antes de importar la aplicación: el motor se crea al importar
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_SCHEMA_ON_STARTUP", "false")

import concurrent.futures
import uuid

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ecom_api.api import deps
from ecom_api.core.config import settings
from ecom_api.core.security import create_token
from ecom_api.db.database import create_schema
from ecom_api.main import app
from ecom_api.services.event_service import event_service
from ecom_api.services.order_service import order_service

PUSH_TOKEN = "push-token-for-tests"
STRIPE_SIGNING_SECRET = "whsec_test_secret"


class FakePublisher:
    """Sustituto de pubsub_v1.PublisherClient que guarda lo publicado."""

    def __init__(self):
        self.messages = []

    def topic_path(self, project, topic):
        return f"projects/{project}/topics/{topic}"

    def publish(self, topic, data, **attributes):
        self.messages.append({"topic": topic, "data": data, "attributes": attributes})
        future = concurrent.futures.Future()
        future.set_result(str(len(self.messages)))
        return future

    def events(self, event):
        return [m for m in self.messages if m["attributes"].get("event") == event]


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_PROJECT_ID", "test-project")
    monkeypatch.setattr(settings, "PUBSUB_PUSH_TOKEN", PUSH_TOKEN)
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_key")
    monkeypatch.setattr(settings, "STRIPE_SIGNING_SECRET", STRIPE_SIGNING_SECRET)
    monkeypatch.setattr(settings, "STRIPE_MAX_NETWORK_RETRIES", 0)
    return settings


@pytest.fixture(autouse=True)
def publisher():
    fake = FakePublisher()
    event_service.set_publisher(fake)
    yield fake
    event_service.set_publisher(None)


@pytest.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_schema(engine)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    # Lo que hace el arranque de la aplicación
    async with factory() as session:
        await order_service.ensure_order_counter(session)
    yield factory
    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory, publisher):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[deps.get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


# ========================================
# TOKENS
# ========================================

def auth(role, uid=None):
    return {"Authorization": f"Bearer {create_token(role, uid)}"}


@pytest.fixture
def admin():
    return auth("admin", str(uuid.uuid4()))


@pytest.fixture
def root():
    return auth("root")


@pytest.fixture
def anon():
    return auth("anon")


# ========================================
# DATOS DE PRUEBA
# ========================================

API = "/api/v1"


async def create_price_list(client, headers, code="default", currency="GBP"):
    response = await client.post(f"{API}/price-lists", headers=headers, json={
        "code": code, "name": f"{code} prices", "currency_code": currency,
    })
    assert response.status_code == 201, response.text
    return response.json()


async def create_product(client, headers, sku, price=None, price_list_id=None, name=None):
    response = await client.post(f"{API}/products", headers=headers, json={
        "sku": sku, "path": sku.lower(), "name": name or f"Product {sku}",
    })
    assert response.status_code == 201, response.text
    product = response.json()
    if price is not None:
        response = await client.put(
            f"{API}/prices",
            headers=headers,
            params={"product_id": product["id"], "price_list_id": price_list_id},
            json={"unit_price": price},
        )
        assert response.status_code == 200, response.text
    return product


async def create_cart_with(client, headers, *lines):
    """Crea un carrito con las líneas (product_id, qty)."""
    response = await client.post(f"{API}/carts", headers=headers)
    assert response.status_code == 201, response.text
    cart = response.json()
    for product_id, qty in lines:
        response = await client.post(f"{API}/carts/{cart['id']}/items", headers=headers,
                                     json={"product_id": product_id, "qty": qty})
        assert response.status_code == 201, response.text
    return cart


GUEST_ADDRESS = {
    "contact_name": "Sam Guest",
    "addr1": "1 High Street",
    "city": "Leeds",
    "postcode": "LS1 1AA",
    "country": "GB",
}
