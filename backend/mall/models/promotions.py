from __future__ import annotations

from ..extensions import db
from mall.money import format_money
from ..serialization import format_timestamp


class Promotion(db.Model):
    """
    Store promotion awaiting or carrying an admin decision.

    Created PENDING by the tenant or a manager; only an admin moves it to
    ACTIVE, REJECTED or STOPPED.
    """
    __tablename__ = "promotions"
    __table_args__ = (
        db.Index("ix_promotions_status_priority", "status", "priority"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store_id = db.Column(db.Integer, db.ForeignKey("stores.id"), nullable=False, index=True)

    title = db.Column(db.String(255), nullable=False)
    promo_type = db.Column(db.String(16), nullable=False)  # PERCENT, AMOUNT, FREESHIP, COUPON
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    coupon_code = db.Column(db.String(64), nullable=True)
    priority = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)
    reject_reason = db.Column(db.String(500), nullable=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    approved_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    store = db.relationship("Store", backref=db.backref("promotions", lazy=True))
    created_by = db.relationship("User", foreign_keys=[created_by_user_id])
    approved_by = db.relationship("User", foreign_keys=[approved_by_user_id])

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "storeId": str(self.store_id),
            "title": self.title,
            "type": self.promo_type,
            "value": format_money(self.value),
            "couponCode": self.coupon_code,
            "priority": self.priority,
            "status": self.status,
            "rejectReason": self.reject_reason,
            "createdById": str(self.created_by_user_id),
            "approvedById": str(self.approved_by_user_id) if self.approved_by_user_id else None,
            "createdAt": format_timestamp(self.created_at),
        }

    def to_admin_dict(self) -> dict:
        return {
            "id": str(self.id),
            "store": {"name": self.store.name, "slug": self.store.slug},
            "title": self.title,
            "type": self.promo_type,
            "value": format_money(self.value),
            "status": self.status,
            "priority": self.priority,
            "createdBy": self.created_by.email,
            "createdAt": format_timestamp(self.created_at),
            "rejectReason": self.reject_reason,
        }
