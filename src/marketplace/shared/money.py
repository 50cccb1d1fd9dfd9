"""Decimal helpers for monetary amounts and derived averages.

Amounts are ``decimal.Decimal`` end to end. Rounding is half-up, the way
prices are rounded on a till, not banker's rounding.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def round_half_up(value, places: int) -> Decimal:
    """Round ``value`` to ``places`` decimal digits, ties away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return as_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def to_money(value) -> Decimal:
    """Normalise ``value`` to a two-place monetary amount."""
    return round_half_up(value, 2)


def as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        # str() first so that floats like 0.1 do not carry binary noise
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Not a valid amount: {value!r}") from exc
