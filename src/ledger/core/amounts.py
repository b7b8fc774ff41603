#!/usr/bin/env python3
"""
Amount Coercion and Formatting Utilities

Ledger amounts are plain floats. Snapshots written by older versions of the
dashboard may carry amounts as strings ("1,234.50"), nulls or garbage, so every
entry point funnels values through the helpers below.

Key Principles:
- Stored transaction amounts are unsigned; direction comes from the type
- Unparseable input is "not a number" (None), never an exception
- Display rounds to whole currency units
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


def parse_amount(value: Any) -> float | None:
    """
    Parse a user- or storage-supplied amount.

    Args:
        value: int, float, or a numeric string such as "$1,234.50"

    Returns:
        The amount as float, or None when the value is not numeric

    Examples:
        parse_amount("1,234.50") -> 1234.5
        parse_amount(300) -> 300.0
        parse_amount("abc") -> None
        parse_amount(True) -> None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        clean = value.replace("$", "").replace(",", "").strip()
        if not clean:
            return None
        try:
            number = float(Decimal(clean))
        except (InvalidOperation, ValueError):
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_amount(value: Any, default: float = 0.0) -> float:
    """Lenient coercion: anything non-numeric becomes `default`."""
    parsed = parse_amount(value)
    return default if parsed is None else parsed


def to_magnitude(value: Any) -> float:
    """Coerce to a non-negative amount."""
    return abs(to_amount(value))


def format_amount(value: Any, currency: str = "THB") -> str:
    """
    Format an amount for display with no fractional digits.

    Examples:
        format_amount(86430) -> "THB 86,430"
        format_amount(-12.6) -> "-THB 13"
    """
    amount = to_amount(value)
    rounded = int(Decimal(str(abs(amount))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}{currency} {rounded:,}"
