"""
Decimal helpers for currency amounts.

Amounts are kept as Decimal quantized to two places, never float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

TWO_PLACES = Decimal(10) ** -2
ZERO = Decimal("0")


def to_currency(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert a numeric value to a Decimal quantized to 2 places.

    Floats go through their string form so 10.1 stays 10.10 rather than
    10.0999999...

    >>> to_currency("10.5")
    Decimal('10.50')
    """
    if isinstance(value, Decimal):
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return Decimal(str(value).strip()).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_currency(value) -> Decimal | None:
    """Like to_currency, but returns None for anything that is not a finite number."""
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        # quantize fails past the context precision (28 digits)
        return to_currency(amount)
    except (InvalidOperation, ValueError):
        return None


def format_amount(value: Decimal) -> str:
    # always exactly two decimals, no thousands separator
    return f"{to_currency(value):.2f}"


def format_rupees(value: Decimal, label: str = "Rs.") -> str:
    return f"{label} {to_currency(value):,.2f}"
