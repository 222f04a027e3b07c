from __future__ import annotations

from datetime import datetime

from services.storefront.app.db.models import Order
from services.storefront.app.models.order import (
    AdminOrderOut,
    OrderItemOut,
    OrderTrackingOut,
    ShippingAddressOut,
)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _shipping(order: Order) -> ShippingAddressOut:
    return ShippingAddressOut(
        line1=order.shipping_address_line1,
        line2=order.shipping_address_line2,
        city=order.shipping_city,
        postal_code=order.shipping_postal_code,
        country=order.shipping_country,
    )


def _items(order: Order) -> list[OrderItemOut]:
    return [
        OrderItemOut(product_id=i.product_id, quantity=i.quantity, price=i.price)
        for i in order.items
    ]


def to_tracking_view(order: Order) -> OrderTrackingOut:
    return OrderTrackingOut(
        tracking_number=order.tracking_number or "",
        delivery_status=order.delivery_status,
        estimated_delivery_date=_iso(order.estimated_delivery_date),
        delivered_at=_iso(order.delivered_at),
        amount=order.amount,
        customer_name=order.customer_name,
        shipping_address=_shipping(order),
        created_at=order.created_at.isoformat(),
        items=_items(order),
    )


def to_admin_view(order: Order) -> AdminOrderOut:
    return AdminOrderOut(
        id=order.id,
        user_id=order.user_id,
        amount=order.amount,
        status=order.status,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        shipping_address=_shipping(order),
        payment_session_id=order.payment_session_id,
        payment_intent_id=order.payment_intent_id,
        tracking_number=order.tracking_number,
        delivery_status=order.delivery_status,
        estimated_delivery_date=_iso(order.estimated_delivery_date),
        delivered_at=_iso(order.delivered_at),
        created_at=order.created_at.isoformat(),
        items=_items(order),
    )
