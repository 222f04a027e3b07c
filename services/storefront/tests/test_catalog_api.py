from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.storefront.app.config import get_settings
from services.storefront.app.db.database import db_session
from services.storefront.app.db.models import Brand, Category, Product, Review
from services.storefront.app.services.auth_fake import fake_token

ADMIN = {"Authorization": f"Bearer {fake_token('admin-1', 'admin@example.com')}"}
SHOPPER = {"Authorization": f"Bearer {fake_token('u-9', 'shopper@example.com')}"}


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "storefront_catalog.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("DB_AUTO_CREATE", "true")
    monkeypatch.setenv("AUTH_PROVIDER", "fake")
    monkeypatch.setenv("ADMIN_EMAILS", "admin@example.com")
    get_settings.cache_clear()

    from services.storefront.app.main import app

    with TestClient(app) as c:
        _seed()
        yield c

    get_settings.cache_clear()


def _seed() -> None:
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    db = db_session()
    db.add_all(
        [
            Category(id="c-1", name="Hoodies", slug="hoodies", created_at=base),
            Category(id="c-2", name="Tees", slug="tees", created_at=base + timedelta(days=1)),
            Brand(id="b-2", name="Zephyr"),
            Brand(id="b-1", name="Atlas"),
        ]
    )
    db.flush()
    db.add_all(
        [
            Product(
                id="p-1",
                name="Hoodie",
                price=Decimal("49.99"),
                category_id="c-1",
                brand_id="b-1",
                stock_quantity=4,
                created_at=base,
            ),
            Product(
                id="p-2",
                name="Tee",
                price=Decimal("18.50"),
                category_id="c-2",
                stock_quantity=0,
                out_of_stock=True,
                created_at=base + timedelta(days=1),
            ),
        ]
    )
    db.flush()
    db.add_all(
        [
            Review(id="r-1", product_id="p-1", user_id="u-1", rating=5, comment="Warm",
                   created_at=base),
            Review(id="r-2", product_id="p-1", user_id="u-2", rating=4, comment="Nice",
                   created_at=base + timedelta(days=2)),
        ]
    )
    db.commit()
    db.close()


def test_list_categories_and_brands(client: TestClient) -> None:
    assert [c["slug"] for c in client.get("/v1/categories").json()] == ["hoodies", "tees"]
    assert [b["name"] for b in client.get("/v1/brands").json()] == ["Atlas", "Zephyr"]


def test_list_products_newest_first(client: TestClient) -> None:
    resp = client.get("/v1/products")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["p-2", "p-1"]


def test_list_products_filters(client: TestClient) -> None:
    assert [p["id"] for p in client.get("/v1/products", params={"category": "hoodies"}).json()] == [
        "p-1"
    ]
    assert client.get("/v1/products", params={"category": "nope"}).json() == []
    assert [p["id"] for p in client.get("/v1/products", params={"in_stock": "true"}).json()] == [
        "p-1"
    ]


def test_get_product(client: TestClient) -> None:
    data = client.get("/v1/products/p-1").json()
    assert data["price"] == "49.99"
    assert data["category_name"] == "Hoodies"

    assert client.get("/v1/products/missing").status_code == 404


def test_product_reviews_with_average(client: TestClient) -> None:
    data = client.get("/v1/products/p-1/reviews").json()
    assert data["average_rating"] == 4.5
    assert [r["id"] for r in data["reviews"]] == ["r-2", "r-1"]

    empty = client.get("/v1/products/p-2/reviews").json()
    assert empty["average_rating"] is None
    assert empty["reviews"] == []


def test_submit_review_requires_sign_in(client: TestClient) -> None:
    resp = client.post("/v1/products/p-1/reviews", json={"rating": 5, "comment": "Great"})
    assert resp.status_code == 401


def test_submit_review_updates_average(client: TestClient) -> None:
    resp = client.post(
        "/v1/products/p-1/reviews", json={"rating": 3, "comment": " Fine "}, headers=SHOPPER
    )
    assert resp.status_code == 201
    assert resp.json()["user_id"] == "u-9"
    assert resp.json()["comment"] == "Fine"

    data = client.get("/v1/products/p-1/reviews").json()
    assert data["average_rating"] == 4.0
    assert len(data["reviews"]) == 3


@pytest.mark.parametrize("rating", [0, 6])
def test_submit_review_rejects_out_of_range_rating(client: TestClient, rating: int) -> None:
    resp = client.post("/v1/products/p-1/reviews", json={"rating": rating}, headers=SHOPPER)
    assert resp.status_code == 422


def test_submit_review_for_unknown_product_is_404(client: TestClient) -> None:
    resp = client.post("/v1/products/nope/reviews", json={"rating": 4}, headers=SHOPPER)
    assert resp.status_code == 404


def _product_body(**overrides: object) -> dict:
    body: dict = {
        "name": "Beanie",
        "description": "Knitted",
        "price": "12.00",
        "image_url": "https://cdn.example.com/beanie.png",
        "category_id": "c-1",
        "brand_id": "b-2",
        "stock_quantity": 7,
        "out_of_stock": False,
    }
    body.update(overrides)
    return body


def test_product_writes_are_admin_only(client: TestClient) -> None:
    assert client.post("/v1/admin/products", json=_product_body()).status_code == 401
    assert (
        client.post("/v1/admin/products", json=_product_body(), headers=SHOPPER).status_code
        == 403
    )
    assert client.delete("/v1/admin/products/p-1", headers=SHOPPER).status_code == 403


def test_admin_creates_product(client: TestClient) -> None:
    resp = client.post("/v1/admin/products", json=_product_body(), headers=ADMIN)
    assert resp.status_code == 201

    created = resp.json()
    assert created["price"] == "12.00"
    assert created["category_name"] == "Hoodies"
    assert created["image_url"] == "https://cdn.example.com/beanie.png"

    fetched = client.get(f"/v1/products/{created['id']}").json()
    assert fetched["name"] == "Beanie"


def test_admin_create_rejects_bad_input(client: TestClient) -> None:
    resp = client.post("/v1/admin/products", json=_product_body(category_id="c-x"), headers=ADMIN)
    assert resp.status_code == 422
    assert "category c-x" in resp.json()["detail"]

    resp = client.post("/v1/admin/products", json=_product_body(price="-1"), headers=ADMIN)
    assert resp.status_code == 422


def test_admin_updates_product(client: TestClient) -> None:
    resp = client.put(
        "/v1/admin/products/p-2",
        json=_product_body(name="Tee v2", category_id="c-1", stock_quantity=3),
        headers=ADMIN,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Tee v2"
    assert resp.json()["category_name"] == "Hoodies"
    assert resp.json()["out_of_stock"] is False

    in_stock = client.get("/v1/products", params={"in_stock": "true"}).json()
    assert {p["id"] for p in in_stock} == {"p-1", "p-2"}

    assert (
        client.put("/v1/admin/products/nope", json=_product_body(), headers=ADMIN).status_code
        == 404
    )


def test_admin_deletes_product_and_its_reviews(client: TestClient) -> None:
    assert client.delete("/v1/admin/products/p-1", headers=ADMIN).status_code == 204
    assert client.get("/v1/products/p-1").status_code == 404

    db = db_session()
    try:
        assert db.query(Review).filter(Review.product_id == "p-1").count() == 0
    finally:
        db.close()

    assert client.delete("/v1/admin/products/p-1", headers=ADMIN).status_code == 404
