"""High-precision Decimal helpers for amount and price arithmetic.

All token amounts are uint256 values (up to ~10^77), so every division and
rounding step runs under a context wide enough to keep them exact.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_HALF_UP, Decimal

# 78 digits of precision, enough for uint256 values
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def to_unit_amount(base_units: int, decimals: int) -> Decimal:
    """Convert a base-unit integer amount into whole token units."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(base_units).scaleb(-decimals)


def round_to_decimals(value: Decimal, decimals: int, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round a value to a fixed number of decimal places.

    Args:
        value: Value to round
        decimals: Number of decimal places to keep
        rounding: A ``decimal`` rounding mode

    Returns:
        The rounded value
    """
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=rounding)


def to_significant_digits(value: Decimal, digits: int) -> Decimal:
    """Round a value to ``digits`` significant digits (half up)."""
    return decimal.Context(prec=digits, rounding=ROUND_HALF_UP).plus(value)


def floor_to_int(value: Decimal) -> int:
    """Round a non-negative value down to an integer."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return int(value.to_integral_value(rounding=decimal.ROUND_FLOOR))


def round_half_up_to_int(value: Decimal) -> int:
    """Round a value to the nearest integer, ties away from zero."""
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return int(value.to_integral_value(rounding=ROUND_HALF_UP))


__all__ = [
    "DECIMAL_HIGH_PREC_CONTEXT",
    "floor_to_int",
    "round_half_up_to_int",
    "round_to_decimals",
    "to_significant_digits",
    "to_unit_amount",
]
