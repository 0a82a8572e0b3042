# backend/tests/test_orders.py
import hashlib
import hmac
import json
import time
from urllib.parse import parse_qs, urlsplit

import pytest
import stripe
from sqlalchemy import delete, select

from conftest import (
    API,
    GUEST_ADDRESS,
    STRIPE_SIGNING_SECRET,
    auth,
    create_cart_with,
    create_price_list,
    create_product,
)
from ecom_api.core.exceptions import StripeSignatureInvalid
from ecom_api.db.models.order_model import Order, OrderCounter
from ecom_api.services.order_service import order_service
from ecom_api.services.payment_service import payment_service


@pytest.fixture
async def catalog(client, admin):
    default = await create_price_list(client, admin, "default")
    drill = await create_product(client, admin, "DRL-1", price=4999, price_list_id=default["id"], name="Cordless drill")
    saw = await create_product(client, admin, "SAW-1", price=2500, price_list_id=default["id"], name="Hand saw")
    return {"default": default, "drill": drill, "saw": saw}


def guest_order(cart_id):
    return {
        "cart_id": cart_id,
        "contact_name": "Sam Guest",
        "email": "sam@example.com",
        "billing": GUEST_ADDRESS,
        "shipping": GUEST_ADDRESS,
    }


async def apply_coupon(client, admin, headers, cart_id, code="SAVE10", reusable=False):
    promo_rule = (await client.post(f"{API}/promo-rules", headers=admin, json={
        "promo_rule_code": f"R-{code}", "name": code, "amount": 1000, "type": "percentage", "target": "total",
    })).json()
    coupon = (await client.post(f"{API}/coupons", headers=admin,
                                json={"coupon_code": code, "promo_rule_id": promo_rule["id"], "reusable": reusable})).json()
    response = await client.post(f"{API}/carts-coupons", headers=headers,
                                 json={"cart_id": cart_id, "coupon_id": coupon["id"]})
    assert response.status_code == 201, response.text
    return coupon


# ========================================
# COLOCACIÓN DE PEDIDOS
# ========================================

async def test_guest_order_totals_and_snapshot(client, anon, catalog, publisher):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 2), (catalog["saw"]["id"], 1))
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))
    assert response.status_code == 201, response.text
    order = response.json()

    assert order["object"] == "order"
    assert order["order_id"] == 1
    assert (order["status"], order["payment"]) == ("pending", "unpaid")
    assert order["customer"] == {"id": None, "contact_name": "Sam Guest", "email": "sam@example.com"}
    assert order["currency"] == "GBP"
    # Las direcciones de invitado se guardan tal cual llegaron
    assert order["billing_address"] == GUEST_ADDRESS
    assert order["shipping_address"] == GUEST_ADDRESS

    items = {i["sku"]: i for i in order["items"]}
    assert items["DRL-1"]["unit_price"] == 4999
    assert items["DRL-1"]["vat"] == 2000
    assert items["DRL-1"]["discount"] is None
    assert items["SAW-1"]["vat"] == 500
    assert order["totals"] == {"total_ex_vat": 12498, "vat_total": 2500, "total_inc_vat": 14998}

    # El carrito no se vacía al pedir
    response = await client.get(f"{API}/carts/{cart['id']}/items", headers=anon)
    assert len(response.json()["data"]) == 2

    created = publisher.events("order.created")
    assert len(created) == 1
    assert json.loads(created[0]["data"])["id"] == order["id"]

    response = await client.get(f"{API}/orders/{order['id']}", headers=anon)
    assert response.json()["billing_address"] == GUEST_ADDRESS
    assert response.json()["shipping_address"] == GUEST_ADDRESS


async def test_order_is_a_snapshot(client, admin, anon, catalog):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    order = (await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))).json()

    await client.put(f"{API}/products/{catalog['drill']['id']}", headers=admin,
                     json={"sku": "DRL-1", "path": "drl-1", "name": "Renamed drill"})
    await client.put(f"{API}/prices", headers=admin,
                     params={"product_id": catalog["drill"]["id"], "price_list_id": catalog["default"]["id"]},
                     json={"unit_price": 1})

    response = await client.get(f"{API}/orders/{order['id']}", headers=anon)
    assert response.status_code == 200
    item = response.json()["items"][0]
    assert (item["name"], item["unit_price"]) == ("Cordless drill", 4999)


async def test_coupon_discount_and_spend(client, admin, anon, catalog):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 2), (catalog["saw"]["id"], 1))
    await apply_coupon(client, admin, anon, cart["id"])

    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))
    assert response.status_code == 201, response.text
    order = response.json()
    items = {i["sku"]: i for i in order["items"]}
    assert items["DRL-1"]["discount"] == 1000
    assert items["DRL-1"]["vat"] == 1800
    assert items["SAW-1"]["discount"] == 250
    assert order["totals"] == {"total_ex_vat": 11248, "vat_total": 2250, "total_inc_vat": 13498}

    response = await client.get(f"{API}/coupons", headers=admin)
    assert response.json()["data"][0]["spend_count"] == 1


async def test_spent_coupon_aborts_the_whole_order(client, admin, anon, catalog):
    first = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    second = await create_cart_with(client, anon, (catalog["saw"]["id"], 1))
    coupon = await apply_coupon(client, admin, anon, first["id"])
    await client.post(f"{API}/carts-coupons", headers=anon, json={"cart_id": second["id"], "coupon_id": coupon["id"]})

    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(first["id"]))
    assert response.status_code == 201
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(second["id"]))
    assert response.status_code == 409
    assert response.json()["code"] == "coupons/coupon-used"

    # Sin huecos en la numeración: el siguiente pedido es el 2
    response = await client.get(f"{API}/carts-coupons", headers=anon, params={"cart_id": second["id"]})
    cart_coupon = response.json()["data"][0]
    await client.delete(f"{API}/carts-coupons/{cart_coupon['id']}", headers=anon)
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(second["id"]))
    assert response.json()["order_id"] == 2


async def test_order_counter_is_seeded_once(db):
    assert await order_service.ensure_order_counter(db) is False


async def test_missing_order_counter_is_not_recreated(client, anon, catalog, db):
    await db.execute(delete(OrderCounter))
    await db.commit()
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))

    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))
    assert response.status_code == 500
    assert response.json()["code"] == "orders/order-counter-missing"

    assert await order_service.ensure_order_counter(db) is True
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))
    assert response.json()["order_id"] == 1


async def test_empty_cart_cannot_be_ordered(client, anon, catalog):
    cart = (await client.post(f"{API}/carts", headers=anon)).json()
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))
    assert response.status_code == 409
    assert response.json()["code"] == "orders/cart-empty"


async def test_mixed_order_shapes_are_rejected(client, anon, catalog):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    body = guest_order(cart["id"])
    body["user_id"] = "1d2c3b4a-5e6f-4a8b-9c0d-1e2f3a4b5c6d"
    response = await client.post(f"{API}/orders", headers=anon, json=body)
    assert response.status_code == 400

    response = await client.post(f"{API}/orders", headers=anon, json={"cart_id": cart["id"], "email": "x@example.com"})
    assert response.status_code == 400
    assert "missing attributes" in response.json()["message"]


# ========================================
# PEDIDOS DE USUARIOS REGISTRADOS
# ========================================

async def sign_up(client, anon, email, price_list_id=None):
    body = {"email": email, "firstname": "Alex", "lastname": "Smith"}
    if price_list_id:
        body["price_list_id"] = price_list_id
    response = await client.post(f"{API}/users", headers=anon, json=body)
    assert response.status_code == 201, response.text
    user = response.json()
    headers = auth("customer", user["id"])
    address_ids = []
    for typ in ("billing", "shipping"):
        response = await client.post(f"{API}/addresses", headers=headers,
                                     json={"user_id": user["id"], "typ": typ, **GUEST_ADDRESS})
        assert response.status_code == 201, response.text
        address_ids.append(response.json()["id"])
    return user, headers, address_ids


def user_order(cart_id, user, address_ids):
    return {
        "cart_id": cart_id,
        "user_id": user["id"],
        "billing_address_id": address_ids[0],
        "shipping_address_id": address_ids[1],
    }


async def test_user_order_uses_user_price_list(client, admin, anon, catalog):
    trade = await create_price_list(client, admin, "trade")
    await client.put(f"{API}/prices", headers=admin,
                     params={"product_id": catalog["drill"]["id"], "price_list_id": trade["id"]},
                     json={"unit_price": 4000})
    user, headers, address_ids = await sign_up(client, anon, "alex@example.com", trade["id"])

    cart = await create_cart_with(client, headers, (catalog["drill"]["id"], 1))
    response = await client.post(f"{API}/orders", headers=headers, json=user_order(cart["id"], user, address_ids))
    assert response.status_code == 201, response.text
    order = response.json()
    assert order["customer"] == {"id": user["id"], "contact_name": "Alex Smith", "email": "alex@example.com"}
    assert order["items"][0]["unit_price"] == 4000
    assert order["totals"]["total_inc_vat"] == 4800

    response = await client.get(f"{API}/orders", headers=headers)
    assert [o["id"] for o in response.json()["data"]] == [order["id"]]


async def test_customer_cannot_order_for_someone_else(client, anon, catalog):
    user, headers, address_ids = await sign_up(client, anon, "alex@example.com")
    other, other_headers, _ = await sign_up(client, anon, "kim@example.com")
    cart = await create_cart_with(client, other_headers, (catalog["drill"]["id"], 1))

    response = await client.post(f"{API}/orders", headers=other_headers,
                                 json=user_order(cart["id"], user, address_ids))
    assert response.status_code == 403

    response = await client.get(f"{API}/orders", headers=other_headers, params={"user_id": user["id"]})
    assert response.status_code == 403


async def test_address_of_another_user_is_not_found(client, admin, anon, catalog):
    user, headers, _ = await sign_up(client, anon, "alex@example.com")
    _, _, other_addresses = await sign_up(client, anon, "kim@example.com")
    cart = await create_cart_with(client, headers, (catalog["drill"]["id"], 1))

    response = await client.post(f"{API}/orders", headers=admin,
                                 json=user_order(cart["id"], user, other_addresses))
    assert response.status_code == 404
    assert response.json()["code"] == "addresses/address-not-found"


async def test_addresses_are_checked_before_coupons(client, admin, anon, catalog):
    user, headers, _ = await sign_up(client, anon, "alex@example.com")
    _, _, other_addresses = await sign_up(client, anon, "kim@example.com")
    spent_cart = await create_cart_with(client, headers, (catalog["saw"]["id"], 1))
    coupon = await apply_coupon(client, admin, headers, spent_cart["id"])
    cart = await create_cart_with(client, headers, (catalog["drill"]["id"], 1))
    await client.post(f"{API}/carts-coupons", headers=headers, json={"cart_id": cart["id"], "coupon_id": coupon["id"]})
    response = await client.post(f"{API}/orders", headers=anon, json=guest_order(spent_cart["id"]))
    assert response.status_code == 201, response.text

    # Cupón ya gastado y dirección ajena: falla primero la dirección
    response = await client.post(f"{API}/orders", headers=admin,
                                 json=user_order(cart["id"], user, other_addresses))
    assert response.status_code == 404
    assert response.json()["code"] == "addresses/address-not-found"


async def test_user_order_is_private(client, anon, catalog):
    user, headers, address_ids = await sign_up(client, anon, "alex@example.com")
    cart = await create_cart_with(client, headers, (catalog["drill"]["id"], 1))
    order = (await client.post(f"{API}/orders", headers=headers, json=user_order(cart["id"], user, address_ids))).json()

    response = await client.get(f"{API}/orders/{order['id']}", headers=anon)
    assert response.status_code == 403
    response = await client.get(f"{API}/orders/{order['id']}", headers=headers)
    assert response.status_code == 200


# ========================================
# STRIPE
# ========================================

class StubStripeHTTPClient(stripe.HTTPClient):
    """Responde a la librería de stripe sin salir a la red."""
    name = "stub"

    def __init__(self, status=200, body=None):
        super().__init__()
        self.status = status
        self.body = body if body is not None else {"id": "cs_test_1", "object": "checkout.session",
                                                   "payment_intent": None}
        self.calls = []

    async def request_async(self, method, url, headers, post_data=None):
        self.calls.append({"method": method, "url": url, "post_data": post_data})
        return json.dumps(self.body).encode(), self.status, {}


def stripe_signature(body: bytes, timestamp=None, secret=STRIPE_SIGNING_SECRET):
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def completed_event(order_id, payment_intent="pi_test_1"):
    return json.dumps({
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test_1", "client_reference_id": order_id, "payment_intent": payment_intent}},
    }).encode()


async def test_stripe_checkout_session(client, anon, catalog, monkeypatch):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 2))
    order = (await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))).json()
    stub = StubStripeHTTPClient()
    monkeypatch.setattr(payment_service, "http_client", stub)

    response = await client.post(f"{API}/orders/{order['id']}/stripecheckout", headers=anon)
    assert response.status_code == 201, response.text
    assert response.json()["id"] == "cs_test_1"

    call = stub.calls[0]
    assert call["method"].lower() == "post"
    assert urlsplit(call["url"]).path == "/v1/checkout/sessions"
    form = parse_qs(call["post_data"])
    assert form["client_reference_id"] == [order["id"]]
    assert form["line_items[0][price_data][currency]"] == ["gbp"]
    assert form["line_items[0][price_data][unit_amount]"] == ["5999"]
    assert form["line_items[0][quantity]"] == ["2"]


async def test_stripe_checkout_keeps_payment_intent(client, anon, catalog, monkeypatch, db):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    order = (await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))).json()
    stub = StubStripeHTTPClient(body={"id": "cs_test_2", "object": "checkout.session", "payment_intent": "pi_test_2"})
    monkeypatch.setattr(payment_service, "http_client", stub)

    response = await client.post(f"{API}/orders/{order['id']}/stripecheckout", headers=anon)
    assert response.status_code == 201, response.text
    db_order = (await db.execute(select(Order).filter(Order.id == order["id"]))).scalars().first()
    assert db_order.stripe_pi == "pi_test_2"


async def test_stripe_gateway_failure(client, anon, catalog, monkeypatch):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    order = (await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))).json()
    monkeypatch.setattr(payment_service, "http_client",
                        StubStripeHTTPClient(status=500, body={"error": {"type": "api_error", "message": "boom"}}))
    response = await client.post(f"{API}/orders/{order['id']}/stripecheckout", headers=anon)
    assert response.status_code == 502
    assert response.json()["code"] == "orders/payment-gateway-error"


async def test_stripe_webhook_records_payment_once(client, anon, catalog, publisher):
    cart = await create_cart_with(client, anon, (catalog["drill"]["id"], 1))
    order = (await client.post(f"{API}/orders", headers=anon, json=guest_order(cart["id"]))).json()
    body = completed_event(order["id"])

    for _ in range(2):
        response = await client.post("/stripe-webhook", content=body,
                                     headers={"Stripe-Signature": stripe_signature(body)})
        assert response.status_code == 204

    response = await client.get(f"{API}/orders/{order['id']}", headers=anon)
    assert (response.json()["status"], response.json()["payment"]) == ("completed", "paid")
    assert len(publisher.events("order.updated")) == 1


async def test_stripe_webhook_rejects_bad_signatures(client):
    body = completed_event("c0ffee00-0000-4000-8000-000000000000")
    for header in (
        stripe_signature(body, secret="whsec_wrong"),
        stripe_signature(body, timestamp=int(time.time()) - 3600),
        "garbage",
        None,
    ):
        headers = {"Stripe-Signature": header} if header else {}
        response = await client.post("/stripe-webhook", content=body, headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "stripe/signature-invalid"


async def test_stripe_webhook_ignores_other_events(client):
    body = json.dumps({"id": "evt_2", "type": "payment_intent.created", "data": {"object": {}}}).encode()
    response = await client.post("/stripe-webhook", content=body, headers={"Stripe-Signature": stripe_signature(body)})
    assert response.status_code == 204


def test_construct_event_tolerance():
    body = b'{"type": "x"}'
    header = stripe_signature(body, timestamp=int(time.time()) - 299)
    assert payment_service.construct_event(body, header)["type"] == "x"

    with pytest.raises(StripeSignatureInvalid):
        payment_service.construct_event(body, stripe_signature(body, timestamp=int(time.time()) - 301))
