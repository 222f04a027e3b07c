from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from services.storefront.app.db.deps import get_order_store
from services.storefront.app.models.order import OrderTrackingOut
from services.storefront.app.services.order_views import to_tracking_view
from services.storefront.app.services.store import OrderStore

router = APIRouter()


@router.get("/v1/orders/track/{tracking_number}", response_model=OrderTrackingOut)
def track_order(
    tracking_number: str, store: OrderStore = Depends(get_order_store)
) -> OrderTrackingOut:
    tracking_number = tracking_number.strip()
    if not tracking_number:
        raise HTTPException(status_code=404, detail="No order found with this tracking number")

    order = store.get_by_tracking_number(tracking_number)
    if order is None:
        raise HTTPException(status_code=404, detail="No order found with this tracking number")

    return to_tracking_view(order)
