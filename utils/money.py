"""
utils/money.py
--------------
Decimal helpers. Amounts never pass through float arithmetic.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from utils.errors import ValidationError

ZERO = Decimal("0")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a number-like value to Decimal.

    Raises:
        ValidationError: If the value is missing, boolean, or not numeric.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def floor_units(value: Decimal) -> Decimal:
    """Truncate toward negative infinity to a whole currency unit."""
    return value.to_integral_value(rounding=ROUND_FLOOR)


def round_units(value: Decimal) -> Decimal:
    """Round half away from zero to a whole currency unit."""
    return value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
