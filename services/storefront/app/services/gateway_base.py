from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class PaymentGatewayError(Exception):
    """Base class for payment gateway errors."""


@dataclass(frozen=True, slots=True)
class GatewayCustomer:
    id: str
    email: str
    created: bool


@dataclass(frozen=True, slots=True)
class SessionLineItem:
    name: str
    unit_amount: int
    quantity: int
    image_url: str | None = None


@dataclass(frozen=True, slots=True)
class PaymentSession:
    id: str
    url: str
    payment_intent_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


class PaymentGateway(Protocol):
    vendor: str

    def ensure_customer(self, email: str, name: str) -> GatewayCustomer: ...

    def create_payment_session(
        self,
        *,
        customer_id: str,
        line_items: list[SessionLineItem],
        currency: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> PaymentSession: ...
