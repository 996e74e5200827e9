# Overview: Flask API routes for store promotions; parses input and returns JSON responses.

# backend/mall/routes/promotions.py
"""Store promotion routes: submit (MANAGER) and list (any store access)"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role, require_store_access
from ..enums import AuthRole, StaffRole, PromotionType
from ..errors import ApiError, error_response
from ..services import promotions_service
from ..validation import Field, validate_payload


promotions_bp = Blueprint("promotions", __name__, url_prefix="/api/promotions")

STORE_ROLES = (AuthRole.ADMIN, AuthRole.TENANT, AuthRole.STAFF)

PROMOTION_FIELDS = [
    Field("title", required=True, min_length=2, max_length=160),
    Field("type", required=True, choices=tuple(t.value for t in PromotionType)),
    Field("value", kind="money"),
    Field("couponCode", max_length=64),
    Field("priority", kind="int", min_value=0, default=0),
]


@promotions_bp.get("/stores/<store_id>/promotions")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access()
def list_store_promotions_route(store_id, auth):
    return jsonify(promotions_service.list_store_promotions(store_id)), 200


@promotions_bp.post("/stores/<store_id>/promotions")
@require_auth
@require_role(*STORE_ROLES)
@require_store_access(staff_roles=(StaffRole.MANAGER,))
def create_promotion_route(store_id, auth):
    """Submit a promotion; it waits in PENDING until an admin decides."""
    try:
        data = validate_payload(request.get_json(silent=True), PROMOTION_FIELDS)
        promo = promotions_service.create_promotion(
            store_id,
            auth.user_id,
            title=data["title"],
            promo_type=PromotionType(data["type"]),
            value=data["value"],
            coupon_code=data["couponCode"],
            priority=data["priority"],
        )
        return jsonify({"id": str(promo.id), "status": promo.status}), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create promotion")
        return jsonify({"error": "Internal server error"}), 500
