# Overview: Service-layer operations for carts; encapsulates business logic and database work.

"""
Cart Aggregator

One active cart per customer. Lines freeze the unit price and currency at
the moment they are added; stock is checked here but only reserved
(decremented) at checkout.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from ..enums import StoreStatus
from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import Cart, CartItem, Product, ProductVariant
from ..money import format_money
from .concurrency import run_with_retry


def find_active_cart(customer_id: int) -> Cart | None:
    return db.session.query(Cart).filter_by(customer_id=customer_id, is_active=True).first()


def get_or_create_active_cart(customer_id: int) -> Cart:
    """
    Return the customer's active cart, creating it on first use.

    The partial unique index on carts(customer_id) WHERE is_active makes
    the insert race-safe: a concurrent request that loses gets an
    IntegrityError and re-reads the winner's cart.
    """
    def _op():
        cart = find_active_cart(customer_id)
        if cart:
            return cart

        cart = Cart(customer_id=customer_id, is_active=True)
        db.session.add(cart)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            cart = find_active_cart(customer_id)
            if cart is None:
                raise
        return cart

    return run_with_retry(_op)


def add_item(customer_id: int, product_id: int, variant_id: int | None, qty: int) -> CartItem:
    """
    Add a priced line to the customer's active cart.

    Raises NotFoundError for a missing/disabled product, a product of a
    non-ACTIVE store, or a variant not belonging to the product;
    BadRequestError when the variant's stock is below qty.
    """
    product = db.session.query(Product).filter_by(id=product_id).first()
    if not product or not product.is_active or product.store.status != StoreStatus.ACTIVE.value:
        raise NotFoundError("Product not found")

    unit_price = product.base_price
    if variant_id is not None:
        variant = (
            db.session.query(ProductVariant)
            .filter_by(id=variant_id, product_id=product.id)
            .first()
        )
        if not variant:
            raise NotFoundError("Variant not found")

        stock = variant.inventory.stock_qty if variant.inventory else 0
        if stock < qty:
            raise BadRequestError("Insufficient stock for variant")
        unit_price = variant.effective_price

    cart = get_or_create_active_cart(customer_id)

    item = CartItem(
        cart_id=cart.id,
        store_id=product.store_id,
        product_id=product.id,
        variant_id=variant_id,
        qty=qty,
        unit_price_snapshot=unit_price,
        currency_snapshot=product.currency,
    )
    db.session.add(item)
    db.session.commit()
    return item


def remove_item(customer_id: int, item_id: int) -> None:
    cart = find_active_cart(customer_id)
    item = None
    if cart:
        item = db.session.query(CartItem).filter_by(id=item_id, cart_id=cart.id).first()
    if not item:
        raise NotFoundError("Cart item not found")

    db.session.delete(item)
    db.session.commit()


def view_cart(customer_id: int) -> dict:
    """
    Cart grouped by store, newest lines first.

    Each group carries a subtotal of unit price snapshot x qty.
    """
    cart = get_or_create_active_cart(customer_id)
    items = (
        db.session.query(CartItem)
        .filter_by(cart_id=cart.id)
        .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        .all()
    )

    groups: dict[int, dict] = {}
    subtotals: dict[int, Decimal] = {}
    for it in items:
        group = groups.get(it.store_id)
        if group is None:
            group = groups[it.store_id] = {
                "storeId": str(it.store_id),
                "storeName": it.store.name,
                "storeSlug": it.store.slug,
                "currency": it.currency_snapshot,
                "items": [],
            }
            subtotals[it.store_id] = Decimal("0")
        group["items"].append(it.to_dict())
        subtotals[it.store_id] += it.line_total

    return {
        "cartId": str(cart.id),
        "groups": [
            {**group, "subtotal": format_money(subtotals[store_id])}
            for store_id, group in groups.items()
        ],
    }
