# backend/tests/test_promotions.py
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from conftest import API, create_product
from ecom_api.core.exceptions import CouponExpired, CouponNotAtStartDate, CouponUsed, CouponVoid
from ecom_api.services.promo_service import check_coupon, compute_discounts

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def rule(**overrides):
    fields = dict(start_at=None, end_at=None, amount=1000, total_threshold=None, type="percentage",
                  target="total", product_id=None, product_ids=None, category_id=None)
    fields.update(overrides)
    return SimpleNamespace(**fields)


def coupon(**overrides):
    fields = dict(coupon_code="SAVE10", void=False, reusable=False, spend_count=0)
    fields.update(overrides)
    return SimpleNamespace(**fields)


LINES = [
    {"product_id": "p1", "qty": 2, "unit_price": 1000},
    {"product_id": "p2", "qty": 1, "unit_price": 500},
]


# ========================================
# VALIDEZ DE CUPONES
# ========================================

def test_coupon_inside_window_is_valid():
    check_coupon(coupon(), rule(start_at=NOW - timedelta(days=1), end_at=NOW + timedelta(days=1)), now=NOW)


def test_coupon_before_start():
    with pytest.raises(CouponNotAtStartDate):
        check_coupon(coupon(), rule(start_at=NOW + timedelta(hours=1)), now=NOW)


def test_coupon_after_end():
    with pytest.raises(CouponExpired):
        check_coupon(coupon(), rule(end_at=NOW - timedelta(seconds=1)), now=NOW)


def test_window_is_checked_before_void():
    with pytest.raises(CouponExpired):
        check_coupon(coupon(void=True), rule(end_at=NOW - timedelta(days=1)), now=NOW)


def test_void_coupon():
    with pytest.raises(CouponVoid):
        check_coupon(coupon(void=True), rule(), now=NOW)


def test_spent_single_use_coupon():
    with pytest.raises(CouponUsed):
        check_coupon(coupon(spend_count=1), rule(), now=NOW)
    check_coupon(coupon(spend_count=3, reusable=True), rule(), now=NOW)


def test_naive_datetimes_are_treated_as_utc():
    naive_end = datetime(2026, 6, 1, 11, 0)
    with pytest.raises(CouponExpired):
        check_coupon(coupon(), rule(end_at=naive_end), now=NOW)


# ========================================
# DESCUENTOS
# ========================================

def test_percentage_on_total():
    assert compute_discounts(rule(amount=1000), LINES) == {"p1": 200, "p2": 50}


def test_percentage_on_single_product():
    assert compute_discounts(rule(amount=2500, target="product", product_id="p2"), LINES) == {"p2": 125}


def test_fixed_amount_is_spread_without_exceeding_lines():
    discounts = compute_discounts(rule(type="fixed", amount=2300, target="total"), LINES)
    assert discounts == {"p1": 2000, "p2": 300}


def test_threshold_not_reached():
    assert compute_discounts(rule(total_threshold=5000), LINES) == {}


def test_category_target_uses_category_products():
    assert compute_discounts(rule(target="category", category_id="c1"), LINES, ["p2"]) == {"p2": 50}


def test_shipping_target_discounts_no_lines():
    assert compute_discounts(rule(target="shipping"), LINES) == {}


# ========================================
# API DE PROMOCIONES
# ========================================

async def create_rule(client, headers, **overrides):
    body = {"promo_rule_code": "SPRING", "name": "Spring sale", "amount": 1000,
            "type": "percentage", "target": "total"}
    body.update(overrides)
    response = await client.post(f"{API}/promo-rules", headers=headers, json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def test_percentage_amount_is_bounded(client, admin):
    response = await client.post(f"{API}/promo-rules", headers=admin, json={
        "promo_rule_code": "BIG", "name": "Too big", "amount": 10001, "type": "percentage", "target": "total",
    })
    assert response.status_code == 400


async def test_product_target_requires_product(client, admin):
    response = await client.post(f"{API}/promo-rules", headers=admin, json={
        "promo_rule_code": "P", "name": "P", "amount": 100, "type": "fixed", "target": "product",
    })
    assert response.status_code == 400


async def test_coupon_lifecycle(client, admin):
    promo_rule = await create_rule(client, admin)
    response = await client.post(f"{API}/coupons", headers=admin,
                                 json={"coupon_code": "SPRING10", "promo_rule_id": promo_rule["id"]})
    assert response.status_code == 201
    created = response.json()
    assert created["spend_count"] == 0
    assert created["void"] is False

    response = await client.post(f"{API}/coupons", headers=admin,
                                 json={"coupon_code": "SPRING10", "promo_rule_id": promo_rule["id"]})
    assert response.status_code == 409
    assert response.json()["code"] == "coupons/coupon-exists"

    response = await client.patch(f"{API}/coupons/{created['id']}", headers=admin, json={"void": True})
    assert response.json()["void"] is True
    response = await client.patch(f"{API}/coupons/{created['id']}", headers=admin, json={"void": False})
    assert response.status_code == 409
    assert response.json()["code"] == "coupons/coupon-void"


async def test_coupon_in_use_cannot_be_deleted(client, admin, anon):
    promo_rule = await create_rule(client, admin)
    coupon_row = (await client.post(f"{API}/coupons", headers=admin,
                                    json={"coupon_code": "SPRING10", "promo_rule_id": promo_rule["id"]})).json()
    cart = (await client.post(f"{API}/carts", headers=anon)).json()
    response = await client.post(f"{API}/carts-coupons", headers=anon,
                                 json={"cart_id": cart["id"], "coupon_id": coupon_row["id"]})
    assert response.status_code == 201

    response = await client.delete(f"{API}/coupons/{coupon_row['id']}", headers=admin)
    assert response.status_code == 409
    assert response.json()["code"] == "coupons/coupon-in-use"


async def test_offers(client, admin, anon):
    promo_rule = await create_rule(client, admin)
    response = await client.post(f"{API}/offers", headers=admin, json={"promo_rule_id": promo_rule["id"]})
    assert response.status_code == 201
    offer = response.json()
    response = await client.post(f"{API}/offers", headers=admin, json={"promo_rule_id": promo_rule["id"]})
    assert response.status_code == 409

    response = await client.get(f"{API}/offers", headers=anon)
    assert [o["id"] for o in response.json()["data"]] == [offer["id"]]
    response = await client.delete(f"{API}/offers/{offer['id']}", headers=admin)
    assert response.status_code == 204


async def test_shipping_tariffs(client, admin, anon):
    body = {"country_code": "GB", "shipping_code": "UK_STD", "name": "Standard", "price": 499, "tax_code": "T20"}
    response = await client.post(f"{API}/shipping-tariffs", headers=admin, json=body)
    assert response.status_code == 201
    tariff = response.json()
    response = await client.post(f"{API}/shipping-tariffs", headers=admin, json=body)
    assert response.json()["code"] == "shipping-tariffs/shipping-tariff-code-exists"

    response = await client.patch(f"{API}/shipping-tariffs/{tariff['id']}", headers=admin, json={"price": 599})
    assert response.json()["price"] == 599
    response = await client.get(f"{API}/shipping-tariffs", headers=anon)
    assert len(response.json()["data"]) == 1


async def test_product_rule_checks_product_exists(client, admin):
    response = await client.post(f"{API}/promo-rules", headers=admin, json={
        "promo_rule_code": "P", "name": "P", "amount": 100, "type": "fixed", "target": "product",
        "product_id": "5b1f7e52-8a34-4c8e-9f0e-1a2b3c4d5e6f",
    })
    assert response.status_code == 404

    product = await create_product(client, admin, "P-1")
    response = await client.post(f"{API}/promo-rules", headers=admin, json={
        "promo_rule_code": "P", "name": "P", "amount": 100, "type": "fixed", "target": "product",
        "product_id": product["id"],
    })
    assert response.status_code == 201
