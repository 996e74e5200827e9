# Overview: Service-layer operations for store staff links.

from __future__ import annotations

from ..enums import AuthRole, StaffRole
from ..errors import NotFoundError
from ..extensions import db
from ..models import Store, StoreStaff, User
from .auth_service import assign_role


def list_staff(store_id: int) -> list[StoreStaff]:
    return (
        db.session.query(StoreStaff)
        .filter_by(store_id=store_id)
        .order_by(StoreStaff.id.asc())
        .all()
    )


def upsert_staff(store_id: int, user_email: str, role: StaffRole) -> StoreStaff:
    """
    Link a user to the store with a staff role.

    Re-linking updates the role and re-enables a disabled link. The user
    also receives the platform STAFF role.
    """
    if not db.session.query(Store).filter_by(id=store_id).first():
        raise NotFoundError("Store not found")

    user = db.session.query(User).filter_by(email=user_email).first()
    if not user:
        raise NotFoundError("User not found")

    assign_role(user.id, AuthRole.STAFF, commit=False)

    link = db.session.query(StoreStaff).filter_by(store_id=store_id, user_id=user.id).first()
    if link:
        link.role = role.value
        link.is_active = True
    else:
        link = StoreStaff(store_id=store_id, user_id=user.id, role=role.value, is_active=True)
        db.session.add(link)

    db.session.commit()
    return link


def disable_staff(store_id: int, link_id: int) -> StoreStaff:
    link = db.session.query(StoreStaff).filter_by(id=link_id, store_id=store_id).first()
    if not link:
        raise NotFoundError("Staff link not found")

    link.is_active = False
    db.session.commit()
    return link
