"""
Money helpers.

Amounts are parsed into Decimal at the boundary and carried as integer
minor units (cents) everywhere else. Rounding is ROUND_HALF_UP, which for
Decimal means half away from zero; it is the only rounding policy used.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal("0.01")

# Largest magnitude accepted for a money amount
MAX_AMOUNT = Decimal("1e15")


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a JSON number or numeric string into a Decimal.

    Returns None for missing, blank, boolean, non-numeric or non-finite input.
    Floats go through str() so 19.99 stays 19.99 instead of its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def parse_amount(value: Any) -> Optional[Decimal]:
    """Like parse_decimal, but None for amounts too large to round to cents."""
    amount = parse_decimal(value)
    if amount is None or abs(amount) >= MAX_AMOUNT:
        return None
    return amount


def round2(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Round to 2 decimal places and return integer minor units."""
    return int(round2(amount) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_cents(cents: int) -> str:
    """Format minor units as a decimal string with exactly 2 places."""
    return str(from_cents(cents))


def divide_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    sign = -1 if numerator < 0 else 1
    quotient, remainder = divmod(abs(numerator), denominator)
    if remainder * 2 >= denominator:
        quotient += 1
    return sign * quotient
