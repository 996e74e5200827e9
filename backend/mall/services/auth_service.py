# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Credential and Token Service

Passwords are hashed with bcrypt (cost from BCRYPT_LOG_ROUNDS). Access
tokens are signed JWTs issued through flask-jwt-extended; the subject is the
user id as a string. Verification lives in session_service.
"""

import bcrypt
from flask import current_app
from flask_jwt_extended import create_access_token
from sqlalchemy.exc import IntegrityError

from ..enums import AuthRole, ROLE_NAMES
from ..errors import ConflictError, InternalError, UnauthenticatedError
from ..extensions import db
from ..models import User, Role, UserRole


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash password using bcrypt. Returns the hash as a string for storage."""
    if rounds is None:
        rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() is timing-safe. Malformed hashes verify as False.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def issue_token(user: User) -> str:
    """Sign an access token for the user (lifetime: JWT_ACCESS_TOKEN_EXPIRES)."""
    return create_access_token(identity=str(user.id))


def get_role(code: AuthRole) -> Role | None:
    return db.session.query(Role).filter_by(code=code.value).first()


def assign_role(user_id: int, code: AuthRole, *, commit: bool = True) -> UserRole:
    """
    Assign role to user (idempotent).

    Raises InternalError when the role table was never seeded.
    """
    role = get_role(code)
    if not role:
        raise InternalError(f"Role seed missing: {code.value}")

    existing = db.session.query(UserRole).filter_by(user_id=user_id, role_id=role.id).first()
    if existing:
        return existing

    user_role = UserRole(user_id=user_id, role_id=role.id)
    db.session.add(user_role)
    if commit:
        db.session.commit()
    return user_role


def create_default_roles() -> None:
    """Create the four platform roles if they don't exist."""
    for code in AuthRole:
        role = get_role(code)
        if role:
            role.name = ROLE_NAMES[code]
        else:
            db.session.add(Role(code=code.value, name=ROLE_NAMES[code]))
    db.session.commit()


def register_user(name: str, email: str, password: str) -> User:
    """
    Self-registration: every new account starts as a CUSTOMER.

    Raises ConflictError when the email is taken (including a concurrent
    registration losing the race on the unique index).
    """
    exists = db.session.query(User).filter_by(email=email).first()
    if exists:
        raise ConflictError("Email already exists")

    customer_role = get_role(AuthRole.CUSTOMER)
    if not customer_role:
        raise InternalError("Role seed missing: CUSTOMER")

    user = User(name=name, email=email, password_hash=hash_password(password))
    db.session.add(user)
    try:
        db.session.flush()
        db.session.add(UserRole(user_id=user.id, role_id=customer_role.id))
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email already exists")

    current_app.logger.info("Registered user id=%s", user.id)
    return user


def authenticate(email: str, password: str) -> User:
    """
    Return the user for valid credentials.

    Unknown email, inactive account and wrong password are indistinguishable
    to the caller.
    """
    user = db.session.query(User).filter_by(email=email).first()
    if not user or not user.is_active:
        raise UnauthenticatedError("Invalid credentials")

    if not verify_password(password, user.password_hash):
        raise UnauthenticatedError("Invalid credentials")

    return user
