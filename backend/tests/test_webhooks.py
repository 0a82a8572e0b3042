# backend/tests/test_webhooks.py
import base64
import hashlib
import hmac
import json
from types import SimpleNamespace

import httpx
import pytest

from conftest import API, PUSH_TOKEN
from ecom_api.core.config import settings
from ecom_api.services.webhook_service import SIGNATURE_HEADER, build_payload, sign_payload, webhook_service

HOOK_URL = "https://hooks.example.com/ecom"


def envelope(data: dict, message_id="m1", **attributes):
    return {
        "message": {
            "messageId": message_id,
            "data": base64.b64encode(json.dumps(data).encode()).decode(),
            "attributes": attributes,
        },
        "subscription": "projects/test-project/subscriptions/test",
    }


async def create_webhook(client, admin, url=HOOK_URL, events=("order.created",)):
    response = await client.post(f"{API}/webhooks", headers=admin, json={"url": url, "events": list(events)})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def deliveries(monkeypatch):
    """Registra los POST salientes; la respuesta se elige con deliveries.status."""
    recorder = SimpleNamespace(status=200, requests=[])

    def handler(request):
        recorder.requests.append(request)
        return httpx.Response(recorder.status)

    monkeypatch.setattr(webhook_service, "transport", httpx.MockTransport(handler))
    return recorder


# ========================================
# FIRMA
# ========================================

def test_sign_payload_is_base64_hmac_sha256():
    expected = base64.b64encode(hmac.new(b"key", b"payload", hashlib.sha256).digest()).decode()
    assert sign_payload("key", b"payload") == expected


def test_build_payload_embeds_json_data():
    payload = json.loads(build_payload("m1", "order.created", "w1", b'{"id": "o1"}'))
    assert payload == {"message_id": "m1", "event": "order.created", "webhook_id": "w1", "data": {"id": "o1"}}


# ========================================
# MANTENIMIENTO DE WEBHOOKS
# ========================================

async def test_webhook_lifecycle(client, admin):
    webhook = await create_webhook(client, admin, events=["order.created", "order.created", "order.updated"])
    assert webhook["events"] == ["order.created", "order.updated"]
    assert webhook["enabled"] is True
    assert len(webhook["signing_key"]) >= 40

    response = await client.get(f"{API}/webhooks", headers=admin)
    assert [w["id"] for w in response.json()["data"]] == [webhook["id"]]

    response = await client.patch(f"{API}/webhooks/{webhook['id']}", headers=admin, json={"enabled": False})
    assert response.json()["enabled"] is False

    response = await client.delete(f"{API}/webhooks/{webhook['id']}", headers=admin)
    assert response.status_code == 204
    response = await client.get(f"{API}/webhooks/{webhook['id']}", headers=admin)
    assert response.status_code == 404
    assert response.json()["code"] == "webhooks/webhook-not-found"


async def test_webhook_validation(client, admin):
    response = await client.post(f"{API}/webhooks", headers=admin,
                                 json={"url": "http://hooks.example.com/ecom", "events": ["order.created"]})
    assert response.status_code == 400

    response = await client.post(f"{API}/webhooks", headers=admin, json={"url": HOOK_URL, "events": ["order.shipped"]})
    assert response.status_code == 400
    assert response.json()["code"] == "webhooks/event-type-not-found"

    await create_webhook(client, admin)
    response = await client.post(f"{API}/webhooks", headers=admin, json={"url": HOOK_URL, "events": ["order.updated"]})
    assert response.status_code == 409
    assert response.json()["code"] == "webhooks/webhook-exists"


async def test_webhooks_are_admin_only(client, anon):
    response = await client.get(f"{API}/webhooks", headers=anon)
    assert response.status_code == 403


# ========================================
# CALLBACK PUSH DE EVENTOS (FAN-OUT)
# ========================================

async def test_events_push_requires_token(client):
    body = envelope({"id": "o1"}, event="order.created")
    response = await client.post("/pubsub/events", json=body)
    assert response.status_code == 401
    assert response.json()["code"] == "auth/unauthorized"

    response = await client.post("/pubsub/events", params={"token": "wrong"}, json={"not": "an envelope"})
    assert response.status_code == 401


@pytest.mark.parametrize("path", ["/pubsub/events", "/pubsub/broadcast"])
async def test_bad_token_wins_over_malformed_body(client, path):
    headers = {"Content-Type": "application/json"}
    response = await client.post(path, params={"token": "wrong"}, content=b"{not json", headers=headers)
    assert response.status_code == 401
    assert response.json()["code"] == "auth/unauthorized"

    response = await client.post(path, content=b"{not json", headers=headers)
    assert response.status_code == 401

    response = await client.post(path, params={"token": PUSH_TOKEN}, content=b"{not json", headers=headers)
    assert response.status_code == 400


async def test_events_fan_out_to_subscribed_webhooks(client, admin, publisher):
    subscribed = await create_webhook(client, admin, "https://a.example.com/hook", ["order.created"])
    await create_webhook(client, admin, "https://b.example.com/hook", ["order.updated"])
    disabled = await create_webhook(client, admin, "https://c.example.com/hook", ["order.created"])
    await client.patch(f"{API}/webhooks/{disabled['id']}", headers=admin, json={"enabled": False})

    response = await client.post("/pubsub/events", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, event="order.created"))
    assert response.status_code == 204

    broadcast_topic = f"projects/test-project/topics/{settings.PUBSUB_BROADCAST_TOPIC}"
    copies = [m for m in publisher.messages if m["topic"] == broadcast_topic]
    assert len(copies) == 1
    assert copies[0]["attributes"] == {"event": "order.created", "webhook_id": subscribed["id"]}
    assert json.loads(copies[0]["data"]) == {"id": "o1"}


async def test_events_with_unknown_type_are_acked(client, publisher):
    response = await client.post("/pubsub/events", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, event="order.shipped"))
    assert response.status_code == 204
    assert publisher.messages == []


async def test_events_with_bad_base64_are_rejected(client):
    body = {"message": {"messageId": "m1", "data": "***", "attributes": {"event": "order.created"}}}
    response = await client.post("/pubsub/events", params={"token": PUSH_TOKEN}, json=body)
    assert response.status_code == 400


# ========================================
# CALLBACK PUSH DE BROADCAST (ENTREGA)
# ========================================

@pytest.mark.parametrize("ack_status", [200, 202, 204])
async def test_broadcast_delivers_signed_post(client, admin, deliveries, ack_status):
    deliveries.status = ack_status
    webhook = await create_webhook(client, admin)

    response = await client.post("/pubsub/broadcast", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, message_id="m7", event="order.created",
                                               webhook_id=webhook["id"]))
    assert response.status_code == 204

    request = deliveries.requests[0]
    assert str(request.url) == HOOK_URL
    assert request.headers[SIGNATURE_HEADER] == sign_payload(webhook["signing_key"], request.content)
    assert json.loads(request.content) == {
        "message_id": "m7", "event": "order.created", "webhook_id": webhook["id"], "data": {"id": "o1"},
    }


async def test_broadcast_failure_is_not_acked(client, admin, deliveries):
    deliveries.status = 500
    webhook = await create_webhook(client, admin)
    response = await client.post("/pubsub/broadcast", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, event="order.created", webhook_id=webhook["id"]))
    assert response.status_code == 409
    assert response.json()["code"] == "webhooks/webhook-post-failed"


async def test_broadcast_to_unknown_webhook_is_acked(client, deliveries):
    response = await client.post("/pubsub/broadcast", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, event="order.created",
                                               webhook_id="c0ffee00-0000-4000-8000-000000000000"))
    assert response.status_code == 204
    assert deliveries.requests == []


async def test_broadcast_to_disabled_webhook_skips_post(client, admin, deliveries):
    webhook = await create_webhook(client, admin)
    await client.patch(f"{API}/webhooks/{webhook['id']}", headers=admin, json={"enabled": False})
    response = await client.post("/pubsub/broadcast", params={"token": PUSH_TOKEN},
                                 json=envelope({"id": "o1"}, event="order.created", webhook_id=webhook["id"]))
    assert response.status_code == 204
    assert deliveries.requests == []


async def test_broadcast_requires_token(client):
    response = await client.post("/pubsub/broadcast", params={"token": "wrong"},
                                 json=envelope({"id": "o1"}, event="order.created", webhook_id="w1"))
    assert response.status_code == 401
