# Overview: Wire formatting for timestamps in model payloads.

from __future__ import annotations

from datetime import datetime, timezone

WIRE_TIMESTAMP = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(value: datetime | None) -> str | None:
    # SQLite hands back naive datetimes; they are stored in UTC
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(WIRE_TIMESTAMP)
