from __future__ import annotations

import hashlib
import logging

import stripe

from services.storefront.app.config import Settings
from services.storefront.app.services.errors import UpstreamConfigMissingError
from services.storefront.app.services.gateway_base import (
    GatewayCustomer,
    PaymentGatewayError,
    PaymentSession,
    SessionLineItem,
)

logger = logging.getLogger(__name__)


def customer_idempotency_key(email: str) -> str:
    """Stable key so concurrent creates for one email collapse onto one customer.

    Stripe rejects a reused key with different parameters, so the create call carries
    only the email and the name is set afterwards.
    """

    digest = hashlib.sha256(email.strip().lower().encode()).hexdigest()
    return f"customer-{digest[:32]}"


class StripePaymentGateway:
    """Payment gateway backed by Stripe customers and hosted Checkout Sessions."""

    vendor = "STRIPE"

    def __init__(self, secret_key: str) -> None:
        stripe.api_key = secret_key

    @classmethod
    def from_settings(cls, settings: Settings) -> StripePaymentGateway:
        if not settings.stripe_secret_key.strip():
            raise UpstreamConfigMissingError("STRIPE_SECRET_KEY", "PAYMENT_GATEWAY=stripe")
        return cls(settings.stripe_secret_key.strip())

    def ensure_customer(self, email: str, name: str) -> GatewayCustomer:
        try:
            customers = stripe.Customer.list(email=email, limit=1)
            if customers.data:
                return GatewayCustomer(id=customers.data[0].id, email=email, created=False)

            customer = stripe.Customer.create(
                email=email,
                idempotency_key=customer_idempotency_key(email),
            )
            if name:
                stripe.Customer.modify(customer.id, name=name)
        except stripe.StripeError as e:
            raise PaymentGatewayError(f"Stripe customer lookup failed: {e}") from e

        logger.info("Stripe customer created: %s", customer.id)
        return GatewayCustomer(id=customer.id, email=email, created=True)

    def create_payment_session(
        self,
        *,
        customer_id: str,
        line_items: list[SessionLineItem],
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> PaymentSession:
        stripe_line_items = [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {
                        "name": item.name,
                        "images": [item.image_url] if item.image_url else [],
                    },
                    "unit_amount": item.unit_amount,
                },
                "quantity": item.quantity,
            }
            for item in line_items
        ]

        try:
            session = stripe.checkout.Session.create(
                customer=customer_id,
                line_items=stripe_line_items,
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            raise PaymentGatewayError(f"Stripe checkout session failed: {e}") from e

        # payment_intent may be unset (created lazily) or expanded into an object.
        intent = session.payment_intent
        intent_id = intent if isinstance(intent, str) else getattr(intent, "id", None)

        return PaymentSession(
            id=session.id,
            url=session.url,
            payment_intent_id=intent_id,
            metadata=dict(metadata),
        )
