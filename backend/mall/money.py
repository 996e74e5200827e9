# Overview: Decimal helpers for 2-decimal currency amounts.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a number (or numeric string) to 2 decimal places."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(value) -> str | None:
    """Serialize an amount as a decimal string with exactly 2 fractional digits."""
    if value is None:
        return None
    return f"{to_money(value):.2f}"
