# Overview: Service-layer operations for inventory; stock levels and low-stock reporting.

from __future__ import annotations

from ..errors import NotFoundError
from ..extensions import db
from ..models import Inventory, Product, ProductVariant
from .concurrency import lock_for_update, run_with_retry


def set_stock(
    store_id: int,
    variant_id: int,
    *,
    stock_qty: int | None = None,
    low_stock_threshold: int | None = None,
) -> Inventory:
    """
    Overwrite stock level and/or low-stock threshold of a store's variant.

    The inventory row is locked so a concurrent checkout either sees the
    old level or the new one, never a mix.
    """
    def _op():
        variant = (
            db.session.query(ProductVariant)
            .join(Product, Product.id == ProductVariant.product_id)
            .filter(ProductVariant.id == variant_id, Product.store_id == store_id)
            .first()
        )
        if not variant:
            raise NotFoundError("Variant not found in this store")

        inventory = lock_for_update(db.session.query(Inventory).filter_by(variant_id=variant_id)).first()
        if inventory is None:
            inventory = Inventory(variant_id=variant_id, stock_qty=0, low_stock_threshold=5)
            db.session.add(inventory)

        if stock_qty is not None:
            inventory.stock_qty = stock_qty
        if low_stock_threshold is not None:
            inventory.low_stock_threshold = low_stock_threshold

        db.session.commit()
        return inventory

    return run_with_retry(_op)


def list_low_stock(store_id: int) -> list[dict]:
    """Variants of the store at or below their low-stock threshold."""
    rows = (
        db.session.query(Inventory, ProductVariant, Product)
        .join(ProductVariant, ProductVariant.id == Inventory.variant_id)
        .join(Product, Product.id == ProductVariant.product_id)
        .filter(
            Product.store_id == store_id,
            Inventory.stock_qty <= Inventory.low_stock_threshold,
        )
        .order_by(Inventory.stock_qty.asc(), Inventory.variant_id.asc())
        .all()
    )
    return [
        {
            "productId": str(product.id),
            "productName": product.name,
            "variantId": str(variant.id),
            "sku": variant.sku,
            "stockQty": inventory.stock_qty,
            "lowStockThreshold": inventory.low_stock_threshold,
        }
        for inventory, variant, product in rows
    ]
