# backend/mall/config.py
from __future__ import annotations
import os
import re
from datetime import timedelta


def parse_duration(value: str | int | None, default: timedelta) -> timedelta:
    """
    Parse token lifetimes such as "7d", "12h", "30m", "45s" or plain seconds.
    """
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return timedelta(seconds=value)

    match = re.fullmatch(r"\s*(\d+)\s*([dhms]?)\s*", str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    amount, unit = int(match.group(1)), match.group(2) or "s"
    return {
        "d": timedelta(days=amount),
        "h": timedelta(hours=amount),
        "m": timedelta(minutes=amount),
        "s": timedelta(seconds=amount),
    }[unit]


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/mall.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///mall.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Signed access tokens
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET", "change_me")
    JWT_ACCESS_TOKEN_EXPIRES = parse_duration(os.environ.get("JWT_EXPIRES_IN"), timedelta(days=7))

    # "*" or a comma-separated list of allowed origins
    CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")

    BCRYPT_LOG_ROUNDS = int(os.environ.get("BCRYPT_LOG_ROUNDS", "12"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
