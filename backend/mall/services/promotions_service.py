from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..enums import PromotionStatus, PromotionType, PROMOTION_DECISIONS
from ..errors import BadRequestError, NotFoundError
from ..extensions import db
from ..models import Promotion, Store
from .concurrency import lock_for_update, run_with_retry

DEFAULT_REJECT_REASON = "No reason provided"


def list_store_promotions(store_id: int, limit: int = 100) -> list[dict]:
    q = db.session.query(Promotion).filter_by(store_id=store_id)
    promos = q.order_by(Promotion.created_at.desc(), Promotion.id.desc()).limit(limit).all()
    return [p.to_dict() for p in promos]


def list_all_promotions(limit: int = 200) -> list[dict]:
    """Moderation queue: by status, then priority (high first), newest first."""
    promos = (
        db.session.query(Promotion)
        .order_by(
            Promotion.status.asc(),
            Promotion.priority.desc(),
            Promotion.created_at.desc(),
            Promotion.id.desc(),
        )
        .limit(limit)
        .all()
    )
    return [p.to_admin_dict() for p in promos]


def create_promotion(
    store_id: int,
    user_id: int,
    *,
    title: str,
    promo_type: PromotionType,
    value: Decimal | None = None,
    coupon_code: str | None = None,
    priority: int = 0,
) -> Promotion:
    """Submit a promotion for moderation; it always starts PENDING."""
    if not db.session.query(Store).filter_by(id=store_id).first():
        raise NotFoundError("Store not found")

    promo = Promotion(
        store_id=store_id,
        title=title,
        promo_type=promo_type.value,
        value=value if value is not None else Decimal("0"),
        coupon_code=coupon_code if promo_type == PromotionType.COUPON else None,
        status=PromotionStatus.PENDING.value,
        created_by_user_id=user_id,
        priority=priority,
    )
    db.session.add(promo)
    db.session.commit()
    return promo


def decide_promotion(
    promo_id: int,
    admin_user_id: int,
    status: PromotionStatus,
    reject_reason: str | None = None,
) -> Promotion:
    """
    Record an admin decision.

    REJECTED keeps the given reason (default "No reason provided"); any
    other decision clears it. PENDING is not a decision.
    """
    if status not in PROMOTION_DECISIONS:
        raise BadRequestError(f"Invalid decision: {status.value}")

    def _op():
        promo = lock_for_update(db.session.query(Promotion).filter_by(id=promo_id)).first()
        if not promo:
            raise NotFoundError("Promotion not found")

        promo.status = status.value
        promo.approved_by_user_id = admin_user_id
        if status == PromotionStatus.REJECTED:
            promo.reject_reason = reject_reason or DEFAULT_REJECT_REASON
        else:
            promo.reject_reason = None

        db.session.commit()
        return promo

    promo = run_with_retry(_op)
    current_app.logger.info(
        "Promotion %s set to %s by admin %s", promo.id, promo.status, admin_user_id
    )
    return promo
