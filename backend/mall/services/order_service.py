# Overview: Service-layer operations for store orders.

from __future__ import annotations

from ..enums import OrderStatus, ORDER_TRANSITIONS
from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import Order
from .concurrency import lock_for_update, run_with_retry


def list_store_orders(store_id: int, limit: int = 50) -> list[Order]:
    return (
        db.session.query(Order)
        .filter_by(store_id=store_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .all()
    )


def get_store_order(store_id: int, order_id: int) -> Order:
    order = db.session.query(Order).filter_by(id=order_id, store_id=store_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def update_order_status(store_id: int, order_id: int, status: OrderStatus) -> Order:
    """
    Move a store order along its lifecycle.

    Only forward transitions are accepted (see ORDER_TRANSITIONS); order
    items are never touched.
    """
    def _op():
        order = lock_for_update(
            db.session.query(Order).filter_by(id=order_id, store_id=store_id)
        ).first()
        if not order:
            raise NotFoundError("Order not found")

        current = OrderStatus(order.status)
        if status not in ORDER_TRANSITIONS[current]:
            raise BadRequestError(f"Cannot move order from {current.value} to {status.value}")

        order.status = status.value
        db.session.commit()
        return order

    return run_with_retry(_op)
