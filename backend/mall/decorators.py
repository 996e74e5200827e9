# Overview: Request decorators enforcing authentication, roles and store access.

from functools import wraps
from flask import current_app, request, jsonify

from .enums import AuthRole, StaffRole
from .errors import ApiError, error_response
from .services import session_service, access_service


def require_auth(f):
    """
    Require a valid bearer token.

    Resolves the caller's AuthContext and passes it to the view as the
    `auth` keyword argument. Returns 401 if the header is missing, the
    token is malformed, expired or forged, or the user no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            context = session_service.resolve_identity(request.headers.get("Authorization"))
        except ApiError as exc:
            return error_response(exc)
        except Exception:
            current_app.logger.exception("Failed to resolve identity")
            return jsonify({"error": "Internal server error"}), 500

        kwargs["auth"] = context
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: AuthRole):
    """
    Require any of the given platform roles.

    Must be applied below @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = kwargs.get("auth")
            if auth is None:
                return jsonify({"error": "Authentication required"}), 401

            try:
                access_service.require_any_role(auth, roles)
            except ApiError as exc:
                return error_response(exc)

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_store_access(staff_roles: tuple[StaffRole, ...] | None = None):
    """
    Require access to the target store.

    The store id comes from the path (`store_id`), then the JSON body
    `storeId`, then the query string `storeId`. The parsed id replaces the
    path argument, so views receive `store_id` as an int.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = kwargs.get("auth")
            if auth is None:
                return jsonify({"error": "Authentication required"}), 401

            body = request.get_json(silent=True)
            body_store_id = body.get("storeId") if isinstance(body, dict) else None

            try:
                store_id = access_service.resolve_store_id(
                    kwargs.get("store_id"),
                    body_store_id,
                    request.args.get("storeId"),
                )
                access_service.require_store_access(auth, store_id, staff_roles)
            except ApiError as exc:
                return error_response(exc)

            if "store_id" in kwargs:
                kwargs["store_id"] = store_id
            return f(*args, **kwargs)

        return decorated_function
    return decorator
