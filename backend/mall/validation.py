from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .errors import ValidationError, BadRequestError
from .money import to_money


# Non-negative amount with up to 2 fractional digits, e.g. "10" or "10.50"
MONEY_RE = re.compile(r"^\d+(\.\d{1,2})?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Maximum price: 9,999,999,999.99 (Numeric(12, 2))
MAX_AMOUNT = Decimal("9999999999.99")

_MISSING = object()


@dataclass(frozen=True)
class Field:
    """
    One payload field:
    - kind: "str", "int", "email", "money", "id", "bool", "list" or "dict"
    - required: must be present and non-null
    - nullable: explicit null accepted (stored as None)
    - choices: closed set of accepted string values
    """
    name: str
    kind: str = "str"
    required: bool = False
    nullable: bool = True
    default: Any = None
    min_length: int | None = None
    max_length: int | None = None
    min_value: int | None = None
    choices: tuple[str, ...] | None = None


def parse_id(value: Any, field: str = "id") -> int:
    """
    Parse a decimal-string (or int) identifier.

    Raises BadRequestError for anything that is not a positive integer.
    """
    if isinstance(value, bool):
        raise BadRequestError(f"Invalid {field}")
    if isinstance(value, int):
        if value <= 0:
            raise BadRequestError(f"Invalid {field}")
        return value
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        if parsed > 0:
            return parsed
    raise BadRequestError(f"Invalid {field}")


def parse_money(value: Any, field: str = "amount") -> Decimal:
    if not isinstance(value, str) or not MONEY_RE.match(value.strip()):
        raise ValidationError(
            "Invalid request payload",
            details=[{"field": field, "message": "must be a decimal string with up to 2 decimals"}],
        )
    amount = to_money(value.strip())
    if amount > MAX_AMOUNT:
        raise ValidationError(
            "Invalid request payload",
            details=[{"field": field, "message": f"cannot exceed {MAX_AMOUNT}"}],
        )
    return amount


def _coerce(field: Field, value: Any) -> tuple[Any, str | None]:
    kind = field.kind

    if kind in ("str", "email"):
        if not isinstance(value, str):
            return None, "must be a string"
        value = value.strip()
        if field.min_length is not None and len(value) < field.min_length:
            return None, f"must be at least {field.min_length} characters"
        if field.max_length is not None and len(value) > field.max_length:
            return None, f"exceeds max length {field.max_length}"
        if kind == "email" and not EMAIL_RE.match(value):
            return None, "must be a valid email"
        if field.choices is not None and value not in field.choices:
            return None, f"must be one of: {', '.join(field.choices)}"
        return value, None

    if kind == "int":
        # bool is an int subclass; floats and numeric strings are rejected
        if isinstance(value, bool) or not isinstance(value, int):
            return None, "must be an integer"
        if field.min_value is not None and value < field.min_value:
            return None, f"must be >= {field.min_value}"
        return value, None

    if kind == "money":
        if not isinstance(value, str) or not MONEY_RE.match(value.strip()):
            return None, "must be a decimal string with up to 2 decimals"
        amount = to_money(value.strip())
        if amount > MAX_AMOUNT:
            return None, f"cannot exceed {MAX_AMOUNT}"
        return amount, None

    if kind == "id":
        try:
            return parse_id(value, field.name), None
        except BadRequestError:
            return None, "must be a numeric id string"

    if kind == "bool":
        if not isinstance(value, bool):
            return None, "must be a boolean"
        return value, None

    if kind == "list":
        if not isinstance(value, list):
            return None, "must be an array"
        return value, None

    if kind == "dict":
        if not isinstance(value, dict):
            return None, "must be an object"
        return value, None

    raise ValueError(f"Unknown field kind: {kind}")


def validate_payload(payload: Any, fields: list[Field]) -> dict:
    """
    Validate and normalize a JSON body against a field list.

    Returns a dict with every declared field (defaults filled in). All
    problems are collected into one ValidationError whose details list
    `{field, message}` entries. Unknown keys are ignored.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    cleaned: dict = {}
    problems: list[dict] = []

    for field in fields:
        raw = payload.get(field.name, _MISSING)

        if raw is _MISSING or raw is None:
            if field.required:
                problems.append({"field": field.name, "message": "is required"})
            elif raw is None and not field.nullable:
                problems.append({"field": field.name, "message": "cannot be null"})
            else:
                cleaned[field.name] = field.default
            continue

        value, problem = _coerce(field, raw)
        if problem:
            problems.append({"field": field.name, "message": problem})
            continue
        cleaned[field.name] = value

    if problems:
        raise ValidationError("Invalid request payload", details=problems)

    return cleaned
