"""Derived price-per-unit calculation for land listings."""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def _to_number(value: Any) -> Optional[float]:
    """Coerce a form or column value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        number = float(Decimal(str(value)))
    except (InvalidOperation, ValueError, TypeError):
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def price_per_unit(total_price: Any, size_value: Any) -> Optional[float]:
    """
    Compute total price divided by land size, rounded to 2 decimal places.

    Returns None when the value is not computable: a missing or non-numeric
    input, or a size that is zero or negative. Never raises.
    """
    total = _to_number(total_price)
    size = _to_number(size_value)

    if total is None or size is None or size <= 0:
        return None

    return round(total / size, 2)
