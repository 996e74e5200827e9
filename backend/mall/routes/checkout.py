# Overview: Flask API routes for cart and checkout operations; parses input and returns JSON responses.

# backend/mall/routes/checkout.py
"""Cart and checkout API routes (CUSTOMER or ADMIN)"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_role
from ..enums import AuthRole
from ..errors import ApiError, error_response
from ..services import cart_service, checkout_service
from ..validation import Field, validate_payload, parse_id, parse_money


checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")

SHOPPER_ROLES = (AuthRole.CUSTOMER, AuthRole.ADMIN)

ADD_ITEM_FIELDS = [
    Field("productId", kind="id", required=True),
    Field("variantId", kind="id"),
    Field("qty", kind="int", required=True, min_value=1),
]

CHECKOUT_FIELDS = [
    Field("shippingFeePerStore", kind="dict", default=None),
]


def _parse_shipping_fees(raw: dict | None) -> dict:
    """{"<storeId>": "<amount>"} -> {store_id: Decimal}"""
    fees = {}
    for store_id, amount in (raw or {}).items():
        field = f"shippingFeePerStore.{store_id}"
        fees[parse_id(store_id, "storeId")] = parse_money(amount, field)
    return fees


@checkout_bp.post("/cart/items")
@require_auth
@require_role(*SHOPPER_ROLES)
def add_cart_item_route(auth):
    """
    Add a product (optionally a variant) to the caller's active cart.

    The unit price is frozen on the line. Stock is checked, not reserved.
    """
    try:
        data = validate_payload(request.get_json(silent=True), ADD_ITEM_FIELDS)
        item = cart_service.add_item(
            auth.user_id,
            data["productId"],
            data["variantId"],
            data["qty"],
        )
        return jsonify({"id": str(item.id)}), 201

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add cart item")
        return jsonify({"error": "Internal server error"}), 500


@checkout_bp.delete("/cart/items/<item_id>")
@require_auth
@require_role(*SHOPPER_ROLES)
def remove_cart_item_route(item_id, auth):
    try:
        cart_service.remove_item(auth.user_id, parse_id(item_id, "itemId"))
        return jsonify({"ok": True}), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove cart item")
        return jsonify({"error": "Internal server error"}), 500


@checkout_bp.get("/cart")
@require_auth
@require_role(*SHOPPER_ROLES)
def view_cart_route(auth):
    try:
        return jsonify(cart_service.view_cart(auth.user_id)), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load cart")
        return jsonify({"error": "Internal server error"}), 500


@checkout_bp.post("/checkout")
@require_auth
@require_role(*SHOPPER_ROLES)
def checkout_route(auth):
    """
    Split the active cart into one order per store.

    All-or-nothing: on any failure no order is created, no stock moves and
    the cart is left as it was.
    """
    try:
        data = validate_payload(request.get_json(silent=True), CHECKOUT_FIELDS)
        fees = _parse_shipping_fees(data["shippingFeePerStore"])
        orders = checkout_service.checkout(auth.user_id, fees)
        return jsonify({"orders": orders}), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to checkout")
        return jsonify({"error": "Internal server error"}), 500
