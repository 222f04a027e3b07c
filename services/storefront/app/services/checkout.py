"""Checkout orchestration.

One call turns a cart snapshot into a persisted order, a hosted payment session and a
tracking number, then sends a best-effort confirmation email. Steps run strictly in
order; a failing step aborts the rest, except the email which is isolated.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from services.storefront.app.config import Settings
from services.storefront.app.db.models import Order, utcnow
from services.storefront.app.models.checkout import CartItemIn, ShippingAddressIn
from services.storefront.app.services.auth_base import AuthBackendError, AuthVerifier, Principal
from services.storefront.app.services.email_base import EmailSender
from services.storefront.app.services.errors import (
    CheckoutError,
    CustomerResolutionError,
    EmptyCartError,
    InvalidAddressError,
    InvalidCartItemError,
    NotificationError,
    OrderItemPersistenceError,
    OrderPersistenceError,
    OrderUpdateError,
    PaymentSessionError,
    PriceMismatchError,
    UnauthenticatedError,
)
from services.storefront.app.services.gateway_base import (
    GatewayCustomer,
    PaymentGateway,
    PaymentGatewayError,
    PaymentSession,
    SessionLineItem,
)
from services.storefront.app.services.log_sink import LogSink
from services.storefront.app.services.notifications import compose_confirmation_email
from services.storefront.app.services.store import (
    NewOrder,
    NewOrderItem,
    OrderStore,
    OrderStoreError,
)
from services.storefront.app.services.tracking import TrackingNumberGenerator, estimate_delivery

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

_REQUIRED_ADDRESS_FIELDS = (
    ("name", "name"),
    ("line1", "line1"),
    ("city", "city"),
    ("postal_code", "postalCode"),
    ("country", "country"),
)

PRICE_POLICIES = {"reject", "trust"}


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_minor_units(price: Decimal) -> int:
    return int((Decimal(price) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def cart_total(items: list[CartItemIn]) -> Decimal:
    return to_money(sum((to_money(i.products.price) * i.quantity for i in items), Decimal("0")))


class CustomerLocks:
    """Per-email mutual exclusion around gateway customer resolution.

    Entries are reference counted and dropped when the last holder leaves.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, list[Any]] = {}

    @contextmanager
    def hold(self, email: str) -> Iterator[None]:
        key = email.strip().lower()
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)


customer_locks = CustomerLocks()


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    payment_url: str
    order_id: str
    tracking_number: str


class CheckoutOrchestrator:
    def __init__(
        self,
        *,
        settings: Settings,
        auth: AuthVerifier,
        gateway: PaymentGateway,
        store: OrderStore,
        mailer: EmailSender,
        log_sink: LogSink,
        tracking: TrackingNumberGenerator | None = None,
        locks: CustomerLocks | None = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        policy = settings.catalog_price_policy.strip().lower()
        if policy not in PRICE_POLICIES:
            raise ValueError(f"Unknown CATALOG_PRICE_POLICY={policy!r}. Expected reject or trust.")

        self._settings = settings
        self._price_policy = policy
        self._auth = auth
        self._gateway = gateway
        self._store = store
        self._mailer = mailer
        self._log_sink = log_sink
        self._tracking = tracking or TrackingNumberGenerator(prefix=settings.tracking_prefix)
        self._locks = locks or customer_locks
        self._now = now

    def process_checkout(
        self,
        *,
        auth_token: str | None,
        cart_items: list[CartItemIn] | None,
        shipping_address: ShippingAddressIn | None,
        origin_url: str,
    ) -> CheckoutResult:
        context: dict[str, Any] = {}
        try:
            return self._process(context, auth_token, cart_items, shipping_address, origin_url)
        except CheckoutError as e:
            logger.error("Checkout failed (%s): %s", e.kind, e.message)
            self._log_sink.record(e.kind, e.message, context)
            raise
        except Exception as e:
            logger.exception("Checkout failed unexpectedly")
            self._log_sink.record("unexpected_error", str(e), context)
            raise

    def _process(
        self,
        context: dict[str, Any],
        auth_token: str | None,
        cart_items: list[CartItemIn] | None,
        shipping_address: ShippingAddressIn | None,
        origin_url: str,
    ) -> CheckoutResult:
        principal = self._authenticate(auth_token)
        email = principal.email or ""
        context.update({"user_id": principal.user_id, "email": email})

        cart_items = self._validate_cart(cart_items)
        address = self._validate_address(shipping_address)
        context["items"] = len(cart_items)

        logger.info("Processing checkout for user %s (%d items)", principal.user_id, len(cart_items))

        if self._price_policy == "reject":
            self._verify_catalog_prices(cart_items)

        customer = self._resolve_customer(email, address.name.strip())
        context["customer_id"] = customer.id

        total = cart_total(cart_items)
        context["amount"] = str(total)

        created_at = self._now()
        order = self._create_order(principal, address, total, created_at)
        order_id = order.id
        context["order_id"] = order_id

        self._create_order_items(order_id, cart_items)

        origin = origin_url.rstrip("/")
        session = self._create_payment_session(customer, cart_items, origin, order_id, principal)
        context["payment_session_id"] = session.id

        tracking_number = self._tracking.generate()
        estimated = estimate_delivery(created_at, self._settings.delivery_estimate_days)
        context["tracking_number"] = tracking_number
        self._assign_tracking(order, session, tracking_number, estimated)

        self._send_confirmation(
            context,
            email=email,
            customer_name=address.name.strip(),
            order_id=order_id,
            tracking_number=tracking_number,
            estimated=estimated,
            total=total,
            cart_items=cart_items,
            origin=origin,
        )

        return CheckoutResult(
            payment_url=session.url, order_id=order_id, tracking_number=tracking_number
        )

    def _authenticate(self, auth_token: str | None) -> Principal:
        token = (auth_token or "").strip()
        if not token:
            raise UnauthenticatedError()

        try:
            principal = self._auth.resolve(token)
        except AuthBackendError as e:
            raise UnauthenticatedError(str(e)) from e

        if principal is None or not principal.email:
            raise UnauthenticatedError()
        return principal

    def _validate_cart(self, cart_items: list[CartItemIn] | None) -> list[CartItemIn]:
        if not cart_items:
            raise EmptyCartError()

        for item in cart_items:
            if item.quantity < 1:
                raise InvalidCartItemError(
                    f"Invalid quantity {item.quantity} for product {item.product_id}"
                )
            if item.products.price < 0:
                raise InvalidCartItemError(f"Invalid price for product {item.product_id}")
        return cart_items

    def _validate_address(self, address: ShippingAddressIn | None) -> ShippingAddressIn:
        if address is None:
            raise InvalidAddressError(["shippingAddress"])

        missing = [
            label
            for attr, label in _REQUIRED_ADDRESS_FIELDS
            if not str(getattr(address, attr) or "").strip()
        ]
        if missing:
            raise InvalidAddressError(missing)
        return address

    def _verify_catalog_prices(self, cart_items: list[CartItemIn]) -> None:
        prices = self._store.catalog_prices([item.product_id for item in cart_items])
        for item in cart_items:
            expected = prices.get(item.product_id)
            submitted = to_money(item.products.price)
            if expected is None or to_money(expected) != submitted:
                raise PriceMismatchError(item.product_id, submitted, expected)

    def _resolve_customer(self, email: str, name: str) -> GatewayCustomer:
        with self._locks.hold(email):
            try:
                customer = self._gateway.ensure_customer(email, name)
            except PaymentGatewayError as e:
                raise CustomerResolutionError(f"Failed to resolve payment customer: {e}") from e

        if customer.created:
            logger.info("New payment customer created: %s", customer.id)
        else:
            logger.info("Existing payment customer found: %s", customer.id)
        return customer

    def _create_order(
        self,
        principal: Principal,
        address: ShippingAddressIn,
        total: Decimal,
        created_at: datetime,
    ) -> Order:
        line2 = (address.line2 or "").strip() or None
        try:
            order = self._store.create_order(
                NewOrder(
                    user_id=principal.user_id,
                    amount=total,
                    customer_name=address.name.strip(),
                    customer_email=principal.email or "",
                    line1=address.line1.strip(),
                    line2=line2,
                    city=address.city.strip(),
                    postal_code=address.postal_code.strip(),
                    country=address.country.strip(),
                    created_at=created_at,
                )
            )
        except OrderStoreError as e:
            raise OrderPersistenceError(f"Failed to create order: {e}") from e

        logger.info("Order created: %s", order.id)
        return order

    def _create_order_items(self, order_id: str, cart_items: list[CartItemIn]) -> None:
        items = [
            NewOrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price=to_money(item.products.price),
            )
            for item in cart_items
        ]
        try:
            self._store.add_items(order_id, items)
        except OrderStoreError as e:
            raise OrderItemPersistenceError(f"Failed to create order items: {e}") from e

        logger.info("Order items created for order %s", order_id)

    def _create_payment_session(
        self,
        customer: GatewayCustomer,
        cart_items: list[CartItemIn],
        origin: str,
        order_id: str,
        principal: Principal,
    ) -> PaymentSession:
        line_items = [
            SessionLineItem(
                name=item.products.name,
                unit_amount=to_minor_units(item.products.price),
                quantity=item.quantity,
                image_url=item.products.image_url or None,
            )
            for item in cart_items
        ]
        try:
            session = self._gateway.create_payment_session(
                customer_id=customer.id,
                line_items=line_items,
                currency=self._settings.currency,
                success_url=f"{origin}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{origin}/checkout/cancel",
                metadata={"order_id": order_id, "user_id": principal.user_id},
            )
        except PaymentGatewayError as e:
            raise PaymentSessionError(f"Failed to create payment session: {e}") from e

        logger.info("Payment session created: %s", session.id)
        return session

    def _assign_tracking(
        self,
        order: Order,
        session: PaymentSession,
        tracking_number: str,
        estimated: datetime,
    ) -> None:
        try:
            self._store.attach_payment_and_tracking(
                order,
                payment_session_id=session.id,
                payment_intent_id=session.payment_intent_id,
                tracking_number=tracking_number,
                estimated_delivery_date=estimated,
            )
        except OrderStoreError as e:
            raise OrderUpdateError(f"Failed to update order: {e}") from e

        logger.info("Tracking number %s assigned to order %s", tracking_number, order.id)

    def _send_confirmation(
        self,
        context: dict[str, Any],
        *,
        email: str,
        customer_name: str,
        order_id: str,
        tracking_number: str,
        estimated: datetime,
        total: Decimal,
        cart_items: list[CartItemIn],
        origin: str,
    ) -> None:
        # Payment completion must never be blocked by the mail channel.
        try:
            message = compose_confirmation_email(
                sender=self._settings.email_from,
                customer_email=email,
                customer_name=customer_name,
                cc=self._settings.admin_email_list,
                order_id=order_id,
                tracking_number=tracking_number,
                estimated_delivery=estimated,
                total=total,
                items=cart_items,
                tracking_url=f"{origin}/track-order?tracking={tracking_number}",
            )
            self._mailer.send(message)
        except Exception as e:
            error = NotificationError(f"Failed to send confirmation email: {e}")
            logger.warning("%s (order %s)", error.message, order_id)
            self._log_sink.record(error.kind, error.message, context)
            return

        logger.info("Confirmation email sent for order %s", order_id)
