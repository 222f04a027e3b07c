"""Checkout error taxonomy.

Each error carries a stable ``kind`` used as the durable log entry kind. Only
``NotificationError`` is non-fatal; the orchestrator catches it itself.
"""

from __future__ import annotations


class CheckoutError(Exception):
    kind = "checkout_failed"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(CheckoutError):
    kind = "unauthenticated"

    def __init__(self, message: str = "User not authenticated or email not available") -> None:
        super().__init__(message)


class EmptyCartError(CheckoutError):
    kind = "empty_cart"

    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(message)


class InvalidAddressError(CheckoutError):
    kind = "invalid_address"

    def __init__(self, missing: list[str]) -> None:
        if missing == ["shippingAddress"]:
            message = "Shipping address is required"
        else:
            message = f"Shipping address is missing required fields: {', '.join(missing)}"
        super().__init__(message)
        self.missing = missing


class InvalidCartItemError(CheckoutError):
    kind = "invalid_cart_item"


class PriceMismatchError(CheckoutError):
    kind = "price_mismatch"

    def __init__(self, product_id: str, submitted: object, expected: object | None) -> None:
        if expected is None:
            message = f"Product {product_id} is not available"
        else:
            message = (
                f"Price for product {product_id} has changed. "
                f"submitted={submitted} current={expected}"
            )
        super().__init__(message)
        self.product_id = product_id
        self.submitted = submitted
        self.expected = expected


class CustomerResolutionError(CheckoutError):
    kind = "customer_resolution_failed"


class OrderPersistenceError(CheckoutError):
    kind = "order_persistence_failed"


class OrderItemPersistenceError(CheckoutError):
    kind = "order_item_persistence_failed"


class PaymentSessionError(CheckoutError):
    kind = "payment_session_failed"


class OrderUpdateError(CheckoutError):
    kind = "order_update_failed"


class NotificationError(CheckoutError):
    kind = "notification_failed"


class UpstreamConfigMissingError(CheckoutError):
    kind = "upstream_config_missing"

    def __init__(self, setting: str, reason: str) -> None:
        super().__init__(f"{setting} is required when {reason}")
        self.setting = setting
