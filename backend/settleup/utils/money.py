"""Currency helpers shared by the balance and settlement services.

Amounts cross the package boundary as ``Decimal`` with two places. The
optimizer works on integer cents so repeated subtraction never drifts.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CENT = Decimal("0.01")

# Dust threshold: balances at or below one minor unit count as settled
TOLERANCE = CENT
TOLERANCE_CENTS = 1

# Largest magnitude that still quantizes to cents well inside the
# default 28-digit decimal context
MAX_AMOUNT = Decimal("1e15")


def to_decimal(value: Any) -> Decimal:
    """
    Convert an incoming amount to Decimal without rounding it.

    Floats go through ``str`` so 0.1 stays 0.1 instead of its binary
    expansion. Raises ValueError for anything that is not a finite number
    or whose magnitude reaches MAX_AMOUNT.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise ValueError(f"invalid amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    if abs(amount) >= MAX_AMOUNT:
        raise ValueError(f"amount out of range: {value!r}")
    return amount


def quantize(amount: Any) -> Decimal:
    """Round to currency minor units (half up)."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Any) -> int:
    return int(quantize(amount) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def is_dust(amount: Any) -> bool:
    """True when ``|amount| <= TOLERANCE``."""
    return abs(to_decimal(amount)) <= TOLERANCE


def within_tolerance(a: Any, b: Any) -> bool:
    return abs(to_decimal(a) - to_decimal(b)) <= TOLERANCE


def to_json_number(amount: Decimal) -> float:
    """Two-place float for JSON responses."""
    return float(quantize(amount))
