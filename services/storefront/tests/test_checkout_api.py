from __future__ import annotations

import re
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.storefront.app.config import get_settings
from services.storefront.app.db.database import db_session
from services.storefront.app.db.models import LogEntry, Order, Product
from services.storefront.app.services.auth_fake import fake_token
from services.storefront.app.services.email_base import EmailMessage, EmailSendError
from services.storefront.app.services.email_log import log_email_sender
from services.storefront.app.services.gateway_mock import mock_gateway

CHECKOUT = "/functions/v1/create-checkout"
AUTH = {"Authorization": f"Bearer {fake_token('u-1', 'shopper@example.com')}"}


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "storefront_checkout.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("DB_AUTO_CREATE", "true")
    monkeypatch.setenv("PAYMENT_GATEWAY", "mock")
    monkeypatch.setenv("AUTH_PROVIDER", "fake")
    monkeypatch.setenv("EMAIL_PROVIDER", "log")
    monkeypatch.setenv("ADMIN_EMAILS", "admin@example.com")
    monkeypatch.setenv("CATALOG_PRICE_POLICY", "reject")
    get_settings.cache_clear()
    mock_gateway.reset()
    log_email_sender.reset()

    from services.storefront.app.main import app

    with TestClient(app) as c:
        db = db_session()
        db.add_all(
            [
                Product(id="A", name="Product A", price=Decimal("10.00"), stock_quantity=3),
                Product(id="B", name="Product B", price=Decimal("5.50"), stock_quantity=3),
            ]
        )
        db.commit()
        db.close()
        yield c

    get_settings.cache_clear()


def _payload(**overrides: object) -> dict:
    payload: dict = {
        "cartItems": [
            {"product_id": "A", "quantity": 2, "products": {"name": "Product A", "price": 10.0}},
            {"product_id": "B", "quantity": 1, "products": {"name": "Product B", "price": 5.5}},
        ],
        "shippingAddress": {
            "name": "Sam Shopper",
            "line1": "1 High Street",
            "line2": "Flat 2",
            "city": "London",
            "postalCode": "N1 1AA",
            "country": "GB",
        },
    }
    payload.update(overrides)
    return payload


def _orders() -> list[Order]:
    db = db_session()
    try:
        return list(db.query(Order).all())
    finally:
        db.close()


def _log_kinds() -> list[str]:
    db = db_session()
    try:
        return [e.kind for e in db.query(LogEntry).all()]
    finally:
        db.close()


def test_preflight_returns_empty_ok(client: TestClient) -> None:
    resp = client.options(CHECKOUT)
    assert resp.status_code == 200
    assert resp.content == b""
    assert resp.headers["access-control-allow-origin"] == "*"


def test_checkout_returns_payment_url_and_tracking(client: TestClient) -> None:
    resp = client.post(
        CHECKOUT, json=_payload(), headers={**AUTH, "Origin": "https://shop.example.com"}
    )
    assert resp.status_code == 200

    data = resp.json()
    assert set(data) == {"url", "orderId", "trackingNumber"}
    assert re.match(r"^TRK\d{8}[A-Z0-9]{4}$", data["trackingNumber"])
    assert resp.headers["access-control-allow-origin"] == "*"

    (order,) = _orders()
    assert order.id == data["orderId"]
    assert order.amount == Decimal("25.50")
    assert order.delivery_status == "processing"
    assert order.shipping_address_line2 == "Flat 2"

    (record,) = mock_gateway.sessions.values()
    assert record.session.url == data["url"]
    assert record.success_url.startswith("https://shop.example.com/checkout/success")

    (message,) = log_email_sender.outbox
    assert message.cc == ["admin@example.com"]

    tracked = client.get(f"/v1/orders/track/{data['trackingNumber']}")
    assert tracked.status_code == 200
    assert tracked.json()["delivery_status"] == "processing"


def test_checkout_without_origin_uses_site_url(client: TestClient) -> None:
    resp = client.post(CHECKOUT, json=_payload(), headers=AUTH)
    assert resp.status_code == 200

    (record,) = mock_gateway.sessions.values()
    assert record.cancel_url == "http://localhost:8080/checkout/cancel"


def test_empty_cart_returns_error_without_order(client: TestClient) -> None:
    resp = client.post(CHECKOUT, json=_payload(cartItems=[]), headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Cart is empty"}
    assert _orders() == []
    assert _log_kinds() == ["empty_cart"]


@pytest.mark.parametrize("payload", [_payload(cartItems=None), {"shippingAddress": {}}])
def test_null_or_absent_cart_is_empty_cart(client: TestClient, payload: dict) -> None:
    resp = client.post(CHECKOUT, json=payload, headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Cart is empty"}
    assert _orders() == []
    assert _log_kinds() == ["empty_cart"]


def test_malformed_body_is_422_and_recorded(client: TestClient) -> None:
    resp = client.post(CHECKOUT, json={"cartItems": [{"product_id": "A"}]})
    assert resp.status_code == 422
    assert resp.headers["access-control-allow-origin"] == "*"
    assert _orders() == []
    assert _log_kinds() == ["invalid_request"]


def test_missing_authorization_is_rejected(client: TestClient) -> None:
    resp = client.post(CHECKOUT, json=_payload())
    assert resp.status_code == 500
    assert "not authenticated" in resp.json()["error"]
    assert mock_gateway.customers == {}


def test_missing_city_is_rejected_before_gateway(client: TestClient) -> None:
    payload = _payload()
    payload["shippingAddress"]["city"] = ""

    resp = client.post(CHECKOUT, json=payload, headers=AUTH)
    assert resp.status_code == 500
    assert "city" in resp.json()["error"]
    assert mock_gateway.customers == {}
    assert _orders() == []


def test_notification_failure_still_succeeds(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    import services.storefront.app.routers.checkout as checkout_router

    class _DownMailer:
        provider = "DOWN"

        def send(self, message: EmailMessage) -> str:
            raise EmailSendError("provider outage")

    monkeypatch.setattr(checkout_router, "get_email_sender", lambda settings: _DownMailer())

    resp = client.post(CHECKOUT, json=_payload(), headers=AUTH)
    assert resp.status_code == 200
    assert resp.json()["url"]
    assert resp.json()["trackingNumber"]
    assert _log_kinds() == ["notification_failed"]


def test_missing_stripe_key_is_reported(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PAYMENT_GATEWAY", "stripe")
    monkeypatch.setenv("STRIPE_SECRET_KEY", "")
    get_settings.cache_clear()

    resp = client.post(CHECKOUT, json=_payload(), headers=AUTH)
    assert resp.status_code == 500
    assert "STRIPE_SECRET_KEY is required" in resp.json()["error"]
    assert _log_kinds() == ["upstream_config_missing"]


def test_unexpected_error_is_generic_500(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    import services.storefront.app.routers.checkout as checkout_router

    class _BrokenGateway:
        vendor = "BROKEN"

        def ensure_customer(self, email: str, name: str) -> object:
            raise RuntimeError("boom")

    monkeypatch.setattr(checkout_router, "get_payment_gateway", lambda settings: _BrokenGateway())

    resp = client.post(CHECKOUT, json=_payload(), headers=AUTH)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}
    assert _log_kinds() == ["unexpected_error"]
