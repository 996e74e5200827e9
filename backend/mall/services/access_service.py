# Overview: Role and per-store access policy for authenticated callers.

"""
Store isolation policy.

Checks run in a fixed order: ADMIN bypasses everything, ownership bypasses
staff-role restrictions, and an active staff link is the most restrictive
path. Failures raise ForbiddenError or BadRequestError.
"""

from __future__ import annotations

from typing import Iterable

from ..enums import AuthRole, StaffRole
from ..errors import BadRequestError, ForbiddenError
from ..validation import parse_id
from .session_service import AuthContext


def has_any_role(auth: AuthContext, roles: Iterable[AuthRole]) -> bool:
    return any(auth.has_role(role) for role in roles)


def require_any_role(auth: AuthContext, roles: Iterable[AuthRole]) -> None:
    if not has_any_role(auth, roles):
        raise ForbiddenError("Forbidden: role not allowed")


def resolve_store_id(*candidates) -> int:
    """
    Pick the first non-empty store id candidate (path, body, query).

    Raises BadRequestError if none is present or it is not numeric.
    """
    for raw in candidates:
        if raw is None or raw == "":
            continue
        try:
            return parse_id(raw, "storeId")
        except BadRequestError:
            raise BadRequestError("Invalid storeId")
    raise BadRequestError("storeId is required")


def require_store_access(
    auth: AuthContext,
    store_id: int | None,
    staff_roles: Iterable[StaffRole] | None = None,
) -> None:
    """
    Enforce access to one store.

    staff_roles=None means any active staff link is enough; otherwise the
    link's role must be in the permitted set. Owners and admins are never
    subject to the staff-role restriction.
    """
    if store_id is None:
        raise BadRequestError("storeId is required")

    if auth.has_role(AuthRole.ADMIN):
        return

    if auth.owns_store(store_id):
        return

    link = auth.staff_link_for(store_id)
    if link is None:
        raise ForbiddenError("Forbidden: no store access")

    if staff_roles is None:
        return

    allowed = set(staff_roles)
    if link.role in allowed:
        return
    raise ForbiddenError("Forbidden: insufficient staff role")
