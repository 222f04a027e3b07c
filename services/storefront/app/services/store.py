from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from services.storefront.app.db.models import Order, OrderItem, Product, Review
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session


class OrderStoreError(Exception):
    """A write against the order tables failed."""


@dataclass(frozen=True, slots=True)
class NewOrder:
    user_id: str
    amount: Decimal
    customer_name: str
    customer_email: str
    line1: str
    line2: str | None
    city: str
    postal_code: str
    country: str
    created_at: datetime


@dataclass(frozen=True, slots=True)
class NewOrderItem:
    product_id: str
    quantity: int
    price: Decimal


class OrderStore:
    """Orders, order items and the read-only catalog prices, over one SQLAlchemy session.

    Every write commits on its own; there is no transaction spanning checkout steps.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def catalog_prices(self, product_ids: list[str]) -> dict[str, Decimal]:
        if not product_ids:
            return {}
        rows = self._db.execute(
            select(Product.id, Product.price).where(Product.id.in_(sorted(set(product_ids))))
        ).all()
        return {product_id: price for product_id, price in rows}

    def create_order(self, new: NewOrder) -> Order:
        order = Order(
            id=uuid4().hex,
            user_id=new.user_id,
            amount=new.amount,
            status="pending",
            customer_name=new.customer_name,
            customer_email=new.customer_email,
            shipping_address_line1=new.line1,
            shipping_address_line2=new.line2,
            shipping_city=new.city,
            shipping_postal_code=new.postal_code,
            shipping_country=new.country,
            created_at=new.created_at,
        )
        self._commit(order)
        return order

    def add_items(self, order_id: str, items: list[NewOrderItem]) -> list[OrderItem]:
        rows = [
            OrderItem(
                id=uuid4().hex,
                order_id=order_id,
                product_id=item.product_id,
                position=position,
                quantity=item.quantity,
                price=item.price,
            )
            for position, item in enumerate(items)
        ]
        self._commit(*rows)
        return rows

    def attach_payment_and_tracking(
        self,
        order: Order,
        *,
        payment_session_id: str,
        payment_intent_id: str | None,
        tracking_number: str,
        estimated_delivery_date: datetime,
    ) -> Order:
        order.payment_session_id = payment_session_id
        order.payment_intent_id = payment_intent_id
        order.tracking_number = tracking_number
        order.estimated_delivery_date = estimated_delivery_date
        order.delivery_status = "processing"
        order.status = "awaiting_payment"
        self._commit(order)
        return order

    def get_order(self, order_id: str) -> Order | None:
        return self._db.get(Order, order_id)

    def get_by_tracking_number(self, tracking_number: str) -> Order | None:
        return self._db.scalars(
            select(Order).where(Order.tracking_number == tracking_number)
        ).first()

    def list_orders(self, delivery_status: str | None = None, search: str | None = None) -> list[Order]:
        query = select(Order).order_by(Order.created_at.desc())
        if delivery_status:
            query = query.where(Order.delivery_status == delivery_status)
        if search:
            query = query.where(Order.customer_name.ilike(f"%{search}%"))
        return list(self._db.scalars(query).all())

    def set_delivery_status(self, order: Order, delivery_status: str, now: datetime) -> Order:
        if delivery_status == "delivered":
            if order.delivered_at is None:
                order.delivered_at = now
        else:
            order.delivered_at = None
        order.delivery_status = delivery_status
        self._commit(order)
        return order

    def delete_order(self, order: Order) -> None:
        try:
            self._db.delete(order)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise OrderStoreError(str(e)) from e

    def counts(self) -> dict[str, int]:
        def _count(model: type) -> int:
            return int(self._db.scalar(select(func.count()).select_from(model)) or 0)

        return {"products": _count(Product), "reviews": _count(Review), "orders": _count(Order)}

    def _commit(self, *rows: object) -> None:
        try:
            self._db.add_all(rows)
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            raise OrderStoreError(str(e)) from e
