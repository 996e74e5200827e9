# Overview: Flask API routes for mall administration; parses input and returns JSON responses.

# backend/mall/routes/admin.py
"""
Admin API routes (ADMIN only)

- GET /promotions: moderation queue across every store
- POST /promotions/<id>/decision: ACTIVE, REJECTED or STOPPED
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role
from ..enums import AuthRole, PromotionStatus, PROMOTION_DECISIONS
from ..errors import ApiError, error_response
from ..services import promotions_service
from ..validation import Field, validate_payload, parse_id


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

DECISION_FIELDS = [
    Field("status", required=True, choices=tuple(s.value for s in PROMOTION_DECISIONS)),
    Field("rejectReason", max_length=500),
]


@admin_bp.get("/promotions")
@require_auth
@require_role(AuthRole.ADMIN)
def list_promotions_route(auth):
    return jsonify(promotions_service.list_all_promotions()), 200


@admin_bp.post("/promotions/<promo_id>/decision")
@require_auth
@require_role(AuthRole.ADMIN)
def decide_promotion_route(promo_id, auth):
    try:
        data = validate_payload(request.get_json(silent=True), DECISION_FIELDS)
        promo = promotions_service.decide_promotion(
            parse_id(promo_id, "promotionId"),
            auth.user_id,
            PromotionStatus(data["status"]),
            data["rejectReason"],
        )
        return jsonify({"id": str(promo.id), "status": promo.status}), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to decide promotion")
        return jsonify({"error": "Internal server error"}), 500
