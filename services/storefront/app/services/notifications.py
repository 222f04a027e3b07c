from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from html import escape

from services.storefront.app.models.checkout import CartItemIn
from services.storefront.app.services.email_base import EmailMessage


def format_gbp(amount: Decimal) -> str:
    return f"£{amount:,.2f}"


def format_long_date(value: datetime) -> str:
    # en-GB long form, e.g. "29 October 2026".
    return f"{value.day} {value:%B %Y}"


def compose_confirmation_email(
    *,
    sender: str,
    customer_email: str,
    customer_name: str,
    cc: list[str],
    order_id: str,
    tracking_number: str,
    estimated_delivery: datetime,
    total: Decimal,
    items: list[CartItemIn],
    tracking_url: str,
) -> EmailMessage:
    rows = "".join(
        "<tr>"
        f"<td>{escape(item.products.name)}</td>"
        f"<td style=\"text-align:center\">{item.quantity}</td>"
        f"<td style=\"text-align:right\">{format_gbp(item.products.price * item.quantity)}</td>"
        "</tr>"
        for item in items
    )

    html = (
        f"<h1>Thank you for your order, {escape(customer_name)}!</h1>"
        f"<p>Order reference: <strong>{escape(order_id)}</strong></p>"
        f"<p>Tracking number: <strong>{escape(tracking_number)}</strong></p>"
        f"<p>Estimated delivery: <strong>{format_long_date(estimated_delivery)}</strong></p>"
        "<table>"
        "<thead><tr><th>Item</th><th>Qty</th><th>Price</th></tr></thead>"
        f"<tbody>{rows}</tbody>"
        "</table>"
        f"<p>Total: <strong>{format_gbp(total)}</strong></p>"
        f"<p><a href=\"{escape(tracking_url, quote=True)}\">Track your order</a></p>"
    )

    # Admin observers are copied, never duplicated with the customer.
    cc_list = [e for e in cc if e.lower() != customer_email.lower()]

    return EmailMessage(
        sender=sender,
        to=[customer_email],
        cc=cc_list,
        subject=f"Order Confirmation - {tracking_number}",
        html=html,
    )
