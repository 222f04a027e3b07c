from __future__ import annotations

from services.storefront.app.config import Settings
from services.storefront.app.services.gateway_base import PaymentGateway
from services.storefront.app.services.gateway_mock import mock_gateway


def get_payment_gateway(settings: Settings) -> PaymentGateway:
    """Select a payment gateway from settings.

    Defaults to the in-memory mock so tests and local dev never reach Stripe unless
    explicitly configured otherwise.
    """

    mode = settings.payment_gateway.strip().lower()

    if mode == "mock":
        return mock_gateway

    if mode == "stripe":
        from services.storefront.app.services.gateway_stripe import StripePaymentGateway

        return StripePaymentGateway.from_settings(settings)

    raise ValueError(f"Unknown PAYMENT_GATEWAY={mode!r}. Expected mock or stripe.")
