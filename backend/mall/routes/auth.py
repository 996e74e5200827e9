# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/mall/routes/auth.py
"""
Authentication API routes

- POST /register: self-registration as CUSTOMER
- POST /login: email + password, returns a signed access token
- GET /me: profile with roles, owned stores and staff links
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth
from ..errors import ApiError, error_response
from ..services import auth_service, session_service
from ..validation import Field, validate_payload


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

REGISTER_FIELDS = [
    Field("name", required=True, min_length=2, max_length=120),
    Field("email", kind="email", required=True, max_length=255),
    Field("password", required=True, min_length=6),
]

LOGIN_FIELDS = [
    Field("email", kind="email", required=True),
    Field("password", required=True, min_length=6),
]


def _session_payload(user) -> dict:
    return {"token": auth_service.issue_token(user), "user": user.to_dict()}


@auth_bp.post("/register")
def register_route():
    """Create a CUSTOMER account and return a token for it. 409 if the email exists."""
    try:
        data = validate_payload(request.get_json(silent=True), REGISTER_FIELDS)
        user = auth_service.register_user(data["name"], data["email"], data["password"])
        return jsonify(_session_payload(user)), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email and password.

    Returns the same shape as /register; 401 on bad credentials.
    """
    try:
        data = validate_payload(request.get_json(silent=True), LOGIN_FIELDS)
        user = auth_service.authenticate(data["email"], data["password"])
        return jsonify(_session_payload(user)), 200

    except ApiError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route(auth):
    profile = session_service.get_profile(auth.user_id)
    if not profile:
        return jsonify({"error": "User not found"}), 404
    return jsonify(profile), 200
