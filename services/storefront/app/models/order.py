from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class DeliveryStatus(str, Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderItemOut(BaseModel):
    product_id: str
    quantity: int
    price: Decimal


class ShippingAddressOut(BaseModel):
    line1: str
    line2: str | None = None
    city: str
    postal_code: str
    country: str


class OrderTrackingOut(BaseModel):
    """Public view of an order, looked up by tracking number."""

    tracking_number: str
    delivery_status: str | None = None
    estimated_delivery_date: str | None = None
    delivered_at: str | None = None
    amount: Decimal
    customer_name: str
    shipping_address: ShippingAddressOut
    created_at: str
    items: list[OrderItemOut] = Field(default_factory=list)


class AdminOrderOut(BaseModel):
    id: str
    user_id: str
    amount: Decimal
    status: str
    customer_name: str
    customer_email: str
    shipping_address: ShippingAddressOut
    payment_session_id: str | None = None
    payment_intent_id: str | None = None
    tracking_number: str | None = None
    delivery_status: str | None = None
    estimated_delivery_date: str | None = None
    delivered_at: str | None = None
    created_at: str
    items: list[OrderItemOut] = Field(default_factory=list)


class DeliveryStatusUpdate(BaseModel):
    delivery_status: DeliveryStatus


class AdminStatsOut(BaseModel):
    products: int
    reviews: int
    orders: int
