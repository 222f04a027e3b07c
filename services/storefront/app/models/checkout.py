from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CartProductIn(BaseModel):
    name: str
    price: Decimal
    image_url: str | None = None


class CartItemIn(BaseModel):
    product_id: str
    quantity: int
    products: CartProductIn


class ShippingAddressIn(BaseModel):
    # Fields default to empty so a missing value is reported as an invalid address
    # rather than a request validation error.
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    line1: str = ""
    line2: str | None = None
    city: str = ""
    postal_code: str = Field(default="", alias="postalCode")
    country: str = ""


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart_items: list[CartItemIn] | None = Field(default=None, alias="cartItems")
    shipping_address: ShippingAddressIn | None = Field(default=None, alias="shippingAddress")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    order_id: str = Field(..., alias="orderId")
    tracking_number: str = Field(..., alias="trackingNumber")


class CheckoutErrorResponse(BaseModel):
    error: str
