from __future__ import annotations

from ..extensions import db
from ..serialization import format_timestamp


class Wing(db.Model):
    """Mall wing: the top-level categorization stores are listed under."""
    __tablename__ = "wings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(64), nullable=False, unique=True, index=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "sortOrder": self.sort_order,
        }


class Store(db.Model):
    """
    Tenant storefront.

    Owned by exactly one user (the tenant). Only ACTIVE stores can be
    purchased from; staff access is granted through StoreStaff links.
    """
    __tablename__ = "stores"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    wing_id = db.Column(db.Integer, db.ForeignKey("wings.id"), nullable=False, index=True)
    owner_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    name = db.Column(db.String(120), nullable=False)
    slug = db.Column(db.String(64), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    currency = db.Column(db.String(3), nullable=False, default="YER")
    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)  # PENDING, ACTIVE, SUSPENDED
    signboard_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    wing = db.relationship("Wing", backref=db.backref("stores", lazy=True))
    owner = db.relationship("User", backref=db.backref("owned_stores", lazy=True))

    def __repr__(self) -> str:
        return f"<Store id={self.id} slug={self.slug!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "wingId": str(self.wing_id),
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "currency": self.currency,
            "status": self.status,
            "signboardUrl": self.signboard_url,
            "createdAt": format_timestamp(self.created_at),
        }


class StoreStaff(db.Model):
    """
    Scoped grant of a staff role over one store.

    A disabled link (is_active=False) grants no access.
    """
    __tablename__ = "store_staff"
    __table_args__ = (
        db.UniqueConstraint("store_id", "user_id", name="uq_store_staff_store_user"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False)  # MANAGER, SALES, PRODUCTS
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    store = db.relationship("Store", backref=db.backref("staff_links", lazy=True))
    user = db.relationship("User", backref=db.backref("staff_links", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "userId": str(self.user_id),
            "userEmail": self.user.email if self.user else None,
            "role": self.role,
            "status": self.is_active,
        }
