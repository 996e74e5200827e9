# Overview: API error hierarchy shared by services, decorators and routes.

from __future__ import annotations

from flask import current_app, jsonify


class ApiError(Exception):
    """Base error carrying an HTTP status and optional structured details."""
    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class BadRequestError(ApiError):
    status_code = 400


class ValidationError(BadRequestError):
    """400-level payload problem; details list the offending fields."""


class UnauthenticatedError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409


class InternalError(ApiError):
    """500-level failure such as missing seed data."""
    status_code = 500


def error_response(exc: ApiError):
    """
    Render an ApiError as `{error, details?}`.

    Server-side failures are logged and answered with a generic message so
    no internal detail leaks to the caller.
    """
    if exc.status_code >= 500:
        current_app.logger.error("Internal error: %s", exc.message)
        return jsonify({"error": "Internal server error"}), exc.status_code

    payload = {"error": exc.message}
    if exc.details is not None:
        payload["details"] = exc.details
    return jsonify(payload), exc.status_code
