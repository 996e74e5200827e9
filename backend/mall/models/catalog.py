from __future__ import annotations

from ..extensions import db
from mall.money import format_money
from ..serialization import format_timestamp


class StoreSection(db.Model):
    """Named shelf inside a store (e.g. "Bedrooms")."""
    __tablename__ = "store_sections"
    __table_args__ = (
        db.UniqueConstraint("store_id", "name", name="uq_store_sections_store_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    store = db.relationship("Store", backref=db.backref("sections", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "name": self.name,
            "sortOrder": self.sort_order,
            "status": self.is_active,
        }


class Product(db.Model):
    """
    Sellable product of one store.

    base_price is the default unit price; variants may override it.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_store_active", "store_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    section_id = db.Column(db.Integer, db.ForeignKey("store_sections.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    base_price = db.Column(db.Numeric(12, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="YER")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    store = db.relationship("Store", backref=db.backref("products", lazy=True))
    section = db.relationship("StoreSection", backref=db.backref("products", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "sectionId": str(self.section_id) if self.section_id else None,
            "name": self.name,
            "description": self.description,
            "basePrice": format_money(self.base_price),
            "currency": self.currency,
            "status": self.is_active,
            "createdAt": format_timestamp(self.created_at),
        }


class ProductImage(db.Model):
    __tablename__ = "product_images"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    image_url = db.Column(db.String(1000), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    product = db.relationship(
        "Product",
        backref=db.backref("images", lazy=True, order_by="ProductImage.sort_order"),
    )

    def to_dict(self) -> dict:
        return {"id": str(self.id), "imageUrl": self.image_url, "sortOrder": self.sort_order}


class ProductVariant(db.Model):
    """Purchasable variant of a product; owns exactly one Inventory row."""
    __tablename__ = "product_variants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    sku = db.Column(db.String(64), nullable=True)
    price_override = db.Column(db.Numeric(12, 2), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("variants", lazy=True))
    inventory = db.relationship("Inventory", back_populates="variant", uselist=False)

    @property
    def effective_price(self):
        if self.price_override is not None:
            return self.price_override
        return self.product.base_price

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "productId": str(self.product_id),
            "sku": self.sku,
            "priceOverride": format_money(self.price_override),
            "status": self.is_active,
            "attributes": [a.to_dict() for a in self.attributes],
            "stockQty": self.inventory.stock_qty if self.inventory else 0,
            "lowStockThreshold": self.inventory.low_stock_threshold if self.inventory else None,
        }


class VariantAttribute(db.Model):
    __tablename__ = "variant_attributes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    variant_id = db.Column(db.Integer, db.ForeignKey("product_variants.id"), nullable=False, index=True)
    attribute_name = db.Column(db.String(64), nullable=False)
    attribute_value = db.Column(db.String(255), nullable=False)

    variant = db.relationship("ProductVariant", backref=db.backref("attributes", lazy=True))

    def to_dict(self) -> dict:
        return {"name": self.attribute_name, "value": self.attribute_value}


class Inventory(db.Model):
    """
    Stock for one variant.

    stock_qty never goes negative (check constraint). version_id turns a
    lost update between concurrent checkouts into a StaleDataError.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.CheckConstraint("stock_qty >= 0", name="ck_inventory_stock_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    variant_id = db.Column(db.Integer, db.ForeignKey("product_variants.id"), nullable=False, unique=True)
    stock_qty = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=5)

    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    version_id = db.Column(db.Integer, nullable=False, default=1)

    variant = db.relationship("ProductVariant", back_populates="inventory")

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_low(self) -> bool:
        return self.stock_qty <= self.low_stock_threshold

    def to_dict(self) -> dict:
        return {
            "variantId": str(self.variant_id),
            "stockQty": self.stock_qty,
            "lowStockThreshold": self.low_stock_threshold,
            "updatedAt": format_timestamp(self.updated_at),
        }
