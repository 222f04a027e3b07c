from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.storefront.app.db.deps import get_catalog_store, get_order_store
from services.storefront.app.db.models import utcnow
from services.storefront.app.models.catalog import ProductIn, ProductOut
from services.storefront.app.models.order import (
    AdminOrderOut,
    AdminStatsOut,
    DeliveryStatus,
    DeliveryStatusUpdate,
)
from services.storefront.app.security import require_admin
from services.storefront.app.services.auth_base import Principal
from services.storefront.app.services.catalog_store import CatalogStore, CatalogStoreError
from services.storefront.app.services.catalog_views import to_product_view
from services.storefront.app.services.order_views import to_admin_view
from services.storefront.app.services.store import OrderStore, OrderStoreError

router = APIRouter(prefix="/v1/admin")


@router.get("/orders", response_model=list[AdminOrderOut])
def list_orders(
    status: str = "all",
    search: str = "",
    store: OrderStore = Depends(get_order_store),
    _admin: Principal = Depends(require_admin),
) -> list[AdminOrderOut]:
    status = status.strip().lower()
    if status != "all" and status not in {s.value for s in DeliveryStatus}:
        raise HTTPException(status_code=422, detail=f"Unknown delivery status: {status}")

    orders = store.list_orders(
        delivery_status=None if status == "all" else status,
        search=search.strip() or None,
    )
    return [to_admin_view(o) for o in orders]


@router.patch("/orders/{order_id}", response_model=AdminOrderOut)
def update_order_status(
    order_id: str,
    payload: DeliveryStatusUpdate,
    store: OrderStore = Depends(get_order_store),
    _admin: Principal = Depends(require_admin),
) -> AdminOrderOut:
    order = store.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    try:
        order = store.set_delivery_status(order, payload.delivery_status.value, utcnow())
    except OrderStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to update order") from e

    return to_admin_view(order)


@router.delete("/orders/{order_id}", status_code=204)
def delete_order(
    order_id: str,
    store: OrderStore = Depends(get_order_store),
    _admin: Principal = Depends(require_admin),
) -> None:
    order = store.get_order(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    try:
        store.delete_order(order)
    except OrderStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to delete order") from e


@router.get("/stats", response_model=AdminStatsOut)
def get_stats(
    store: OrderStore = Depends(get_order_store),
    _admin: Principal = Depends(require_admin),
) -> AdminStatsOut:
    return AdminStatsOut(**store.counts())


def _check_references(store: CatalogStore, payload: ProductIn) -> None:
    missing = store.missing_references(payload)
    if missing:
        raise HTTPException(status_code=422, detail=f"Unknown {', '.join(missing)}")


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    store: CatalogStore = Depends(get_catalog_store),
    _admin: Principal = Depends(require_admin),
) -> ProductOut:
    _check_references(store, payload)

    try:
        product = store.create_product(payload)
    except CatalogStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to create product") from e

    return to_product_view(product)


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductIn,
    store: CatalogStore = Depends(get_catalog_store),
    _admin: Principal = Depends(require_admin),
) -> ProductOut:
    product = store.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    _check_references(store, payload)

    try:
        product = store.update_product(product, payload)
    except CatalogStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to update product") from e

    return to_product_view(product)


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    store: CatalogStore = Depends(get_catalog_store),
    _admin: Principal = Depends(require_admin),
) -> None:
    product = store.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        store.delete_product(product)
    except CatalogStoreError as e:
        raise HTTPException(status_code=500, detail="Failed to delete product") from e
