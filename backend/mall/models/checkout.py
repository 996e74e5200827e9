from __future__ import annotations

from ..extensions import db
from mall.money import format_money
from ..serialization import format_timestamp


class Cart(db.Model):
    """
    Customer cart.

    At most one active cart per customer, enforced by a partial unique index
    so concurrent first adds cannot create two. Checkout empties the cart but
    keeps the row active for reuse.
    """
    __tablename__ = "carts"
    __table_args__ = (
        db.Index(
            "uq_carts_active_customer",
            "customer_id",
            unique=True,
            sqlite_where=db.text("is_active = 1"),
            postgresql_where=db.text("is_active"),
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())


class CartItem(db.Model):
    """Cart line with a frozen price snapshot taken when it was added."""
    __tablename__ = "cart_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("carts.id"), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    variant_id = db.Column(db.Integer, db.ForeignKey("product_variants.id"), nullable=True)

    qty = db.Column(db.Integer, nullable=False)
    unit_price_snapshot = db.Column(db.Numeric(12, 2), nullable=False)
    currency_snapshot = db.Column(db.String(3), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    cart = db.relationship("Cart", backref=db.backref("items", lazy=True))
    store = db.relationship("Store")
    product = db.relationship("Product")
    variant = db.relationship("ProductVariant")

    @property
    def line_total(self):
        return self.unit_price_snapshot * self.qty

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "productId": str(self.product_id),
            "variantId": str(self.variant_id) if self.variant_id else None,
            "name": self.product.name if self.product else None,
            "qty": self.qty,
            "unitPrice": format_money(self.unit_price_snapshot),
        }


class Order(db.Model):
    """
    Per-store order produced by checkout.

    Owned by the store once created; the cart flow never touches it again.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_store_status_created", "store_id", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    currency = db.Column(db.String(3), nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    shipping_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False)

    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)
    payment_status = db.Column(db.String(16), nullable=False, default="UNPAID", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    store = db.relationship("Store", backref=db.backref("orders", lazy=True))
    customer = db.relationship("User")
    items = db.relationship("OrderItem", backref="order", lazy=True, order_by="OrderItem.id")

    def to_summary(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "total": format_money(self.total),
            "currency": self.currency,
        }

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "customerId": str(self.customer_id),
            "status": self.status,
            "paymentStatus": self.payment_status,
            "currency": self.currency,
            "subtotal": format_money(self.subtotal),
            "shippingFee": format_money(self.shipping_fee),
            "total": format_money(self.total),
            "itemsCount": sum(it.qty for it in self.items),
            "createdAt": format_timestamp(self.created_at),
        }


class OrderItem(db.Model):
    """Immutable order line carrying its own price snapshot."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    variant_id = db.Column(db.Integer, db.ForeignKey("product_variants.id"), nullable=True)

    qty = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    snapshot_json = db.Column(db.Text, nullable=True)  # JSON: productName, unitPrice

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "productId": str(self.product_id),
            "variantId": str(self.variant_id) if self.variant_id else None,
            "qty": self.qty,
            "unitPrice": format_money(self.unit_price),
        }
