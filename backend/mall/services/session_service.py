# Overview: Service-layer operations for session; resolves bearer tokens into an AuthContext.

"""
Identity resolution for authenticated requests.

A bearer token is verified (signature + expiry) by flask-jwt-extended, then
the subject is looked up to build an immutable AuthContext: the caller's
roles, the stores they own and their active staff links. The context is
handed explicitly to route handlers; nothing is kept on flask.g.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..enums import AuthRole, StaffRole
from ..errors import UnauthenticatedError
from ..extensions import db
from ..models import User, Store, StoreStaff

BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class StaffLink:
    store_id: int
    role: StaffRole


@dataclass(frozen=True)
class AuthContext:
    """
    Authorization context for one request.

    All fields are read once at identity resolution time.
    """
    user_id: int
    email: str
    roles: frozenset[AuthRole] = field(default_factory=frozenset)
    owned_store_ids: frozenset[int] = field(default_factory=frozenset)
    staff_links: tuple[StaffLink, ...] = ()

    def has_role(self, role: AuthRole) -> bool:
        return role in self.roles

    def owns_store(self, store_id: int) -> bool:
        return store_id in self.owned_store_ids

    def staff_link_for(self, store_id: int) -> StaffLink | None:
        for link in self.staff_links:
            if link.store_id == store_id:
                return link
        return None


def parse_auth_header(header: str | None) -> str | None:
    if not header:
        return None
    match = BEARER_RE.match(header.strip())
    return match.group(1).strip() if match else None


def _subject_from_token(token: str) -> int:
    try:
        decoded = decode_token(token)
        return int(decoded["sub"])
    except (PyJWTError, JWTExtendedException, KeyError, TypeError, ValueError):
        raise UnauthenticatedError("Invalid token")


def build_context(user: User) -> AuthContext:
    roles = set()
    for user_role in user.user_roles:
        try:
            roles.add(AuthRole(user_role.role.code))
        except ValueError:
            # Unknown role codes in the table grant nothing
            continue

    owned = db.session.query(Store.id).filter_by(owner_user_id=user.id).all()
    links = (
        db.session.query(StoreStaff.store_id, StoreStaff.role)
        .filter_by(user_id=user.id, is_active=True)
        .all()
    )

    return AuthContext(
        user_id=user.id,
        email=user.email,
        roles=frozenset(roles),
        owned_store_ids=frozenset(row[0] for row in owned),
        staff_links=tuple(StaffLink(store_id=row[0], role=StaffRole(row[1])) for row in links),
    )


def resolve_identity(auth_header: str | None) -> AuthContext:
    """
    Resolve an Authorization header into an AuthContext.

    Raises UnauthenticatedError when the token is missing, malformed,
    expired, signed with another key, or names a missing/inactive user.
    """
    token = parse_auth_header(auth_header)
    if not token:
        raise UnauthenticatedError("Missing Bearer token")

    user_id = _subject_from_token(token)

    user = db.session.query(User).filter_by(id=user_id).first()
    if not user or not user.is_active:
        raise UnauthenticatedError("Invalid token user")

    return build_context(user)


def get_profile(user_id: int) -> dict | None:
    """Profile for /auth/me: roles, owned stores and active staff links."""
    user = db.session.query(User).filter_by(id=user_id).first()
    if not user:
        return None

    owned = db.session.query(Store).filter_by(owner_user_id=user.id).order_by(Store.id.asc()).all()
    links = (
        db.session.query(StoreStaff)
        .filter_by(user_id=user.id, is_active=True)
        .order_by(StoreStaff.store_id.asc())
        .all()
    )

    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "roles": user.role_codes,
        "ownedStores": [
            {"id": str(s.id), "name": s.name, "slug": s.slug, "status": s.status}
            for s in owned
        ],
        "staffStores": [
            {
                "storeId": str(link.store_id),
                "role": link.role,
                "store": {"name": link.store.name, "slug": link.store.slug},
            }
            for link in links
        ],
    }
