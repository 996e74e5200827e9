# Overview: Service-layer operations for checkout; splits a cart into per-store orders atomically.

"""
Checkout / Order-Splitting Engine

A multi-store cart becomes one order per store inside a single unit of
work: either every order, every inventory decrement and the cart clearing
are committed together, or nothing is.

Stock is re-checked against locked inventory rows at transaction time; the
add-to-cart check is advisory only. Inventory carries an optimistic
version_id, so a concurrent decrement that slips past the lock surfaces as
StaleDataError and the whole checkout is retried on fresh state.
"""

from __future__ import annotations

import json
from decimal import Decimal

from flask import current_app

from ..enums import OrderStatus, PaymentStatus, StoreStatus
from ..errors import BadRequestError
from ..models import Cart, CartItem, Inventory, Order, OrderItem
from ..money import to_money, format_money
from .concurrency import UnitOfWork, run_with_retry


def group_by_store(items: list[CartItem]) -> dict[int, list[CartItem]]:
    """Partition cart lines by store id, keeping first-seen order."""
    groups: dict[int, list[CartItem]] = {}
    for it in items:
        groups.setdefault(it.store_id, []).append(it)
    return groups


def _ensure_sellable(store_id: int, group: list[CartItem]) -> None:
    store = group[0].store
    if store is None or store.status != StoreStatus.ACTIVE.value:
        raise BadRequestError("Store is not accepting orders", details={"storeId": str(store_id)})

    for it in group:
        if it.product is None or not it.product.is_active:
            raise BadRequestError("Product is no longer available", details={"productId": str(it.product_id)})


def _decrement_stock(uow: UnitOfWork, item: CartItem) -> None:
    inventory = uow.locked(
        uow.session.query(Inventory).filter_by(variant_id=item.variant_id)
    ).first()
    if inventory is None:
        raise BadRequestError("Inventory missing for variant")

    if inventory.stock_qty < item.qty:
        raise BadRequestError(
            "Insufficient stock during checkout",
            details={
                "variantId": str(item.variant_id),
                "requested": item.qty,
                "available": inventory.stock_qty,
            },
        )
    inventory.stock_qty -= item.qty


def _build_order(customer_id: int, store_id: int, group: list[CartItem], shipping_fee: Decimal) -> Order:
    subtotal = to_money(sum((it.line_total for it in group), Decimal("0")))
    shipping_fee = to_money(shipping_fee)

    order = Order(
        store_id=store_id,
        customer_id=customer_id,
        currency=group[0].currency_snapshot,
        subtotal=subtotal,
        shipping_fee=shipping_fee,
        total=subtotal + shipping_fee,
        status=OrderStatus.PENDING.value,
        payment_status=PaymentStatus.UNPAID.value,
    )
    order.items = [
        OrderItem(
            product_id=it.product_id,
            variant_id=it.variant_id,
            qty=it.qty,
            unit_price=it.unit_price_snapshot,
            snapshot_json=json.dumps({
                "productName": it.product.name if it.product else None,
                "unitPrice": format_money(it.unit_price_snapshot),
            }),
        )
        for it in group
    ]
    return order


def checkout(customer_id: int, shipping_fee_per_store: dict[int, Decimal] | None = None) -> list[dict]:
    """
    Convert the customer's active cart into one PENDING/UNPAID order per store.

    shipping_fee_per_store maps store id -> fee; stores not listed pay 0.
    Raises BadRequestError for an empty cart or insufficient stock; in every
    failure case no order, decrement or cart change persists.
    """
    fees = shipping_fee_per_store or {}

    def _op():
        with UnitOfWork() as uow:
            cart = uow.locked(
                uow.session.query(Cart).filter_by(customer_id=customer_id, is_active=True)
            ).first()
            items = []
            if cart:
                items = (
                    uow.session.query(CartItem)
                    .filter_by(cart_id=cart.id)
                    .order_by(CartItem.id.asc())
                    .all()
                )
            if not items:
                raise BadRequestError("Cart is empty")

            orders = []
            for store_id, group in group_by_store(items).items():
                _ensure_sellable(store_id, group)
                order = _build_order(customer_id, store_id, group, fees.get(store_id, Decimal("0")))
                uow.add(order)

                for it in group:
                    if it.variant_id is not None:
                        _decrement_stock(uow, it)

                orders.append(order)

            for it in items:
                uow.delete(it)

            uow.flush()
            summaries = [order.to_summary() for order in orders]

        current_app.logger.info(
            "Checkout for customer %s created orders %s",
            customer_id,
            [s["id"] for s in summaries],
        )
        return summaries

    return run_with_retry(_op)
