from __future__ import annotations

import threading
from dataclasses import dataclass
from uuid import uuid4

from services.storefront.app.services.gateway_base import (
    GatewayCustomer,
    PaymentSession,
    SessionLineItem,
)


@dataclass(frozen=True, slots=True)
class MockSessionRecord:
    session: PaymentSession
    customer_id: str
    line_items: list[SessionLineItem]
    currency: str
    success_url: str
    cancel_url: str


class MockPaymentGateway:
    """In-memory gateway for tests and local dev.

    Customers are keyed by lower-cased email, so ``ensure_customer`` is an upsert.
    """

    vendor = "MOCK"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.customers: dict[str, GatewayCustomer] = {}
        self.sessions: dict[str, MockSessionRecord] = {}

    def ensure_customer(self, email: str, name: str) -> GatewayCustomer:
        del name
        key = email.strip().lower()
        with self._lock:
            existing = self.customers.get(key)
            if existing is not None:
                return GatewayCustomer(id=existing.id, email=existing.email, created=False)

            customer = GatewayCustomer(id=f"cus_{uuid4().hex[:14]}", email=email, created=True)
            self.customers[key] = customer
            return customer

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
        session_id = f"cs_test_{uuid4().hex[:24]}"
        session = PaymentSession(
            id=session_id,
            url=f"https://checkout.mock.local/pay/{session_id}",
            payment_intent_id=f"pi_{uuid4().hex[:24]}",
            metadata=dict(metadata),
        )
        with self._lock:
            self.sessions[session_id] = MockSessionRecord(
                session=session,
                customer_id=customer_id,
                line_items=list(line_items),
                currency=currency,
                success_url=success_url,
                cancel_url=cancel_url,
            )
        return session

    def reset(self) -> None:
        with self._lock:
            self.customers.clear()
            self.sessions.clear()


mock_gateway = MockPaymentGateway()
