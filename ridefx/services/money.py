"""Money / rounding helpers.

Centralized so conversion and display formatting use identical rounding
semantics: half away from zero on the value's shortest decimal representation,
so 1.005 rounds to 1.01 rather than to the binary neighbour.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import math
from typing import Optional


def to_decimal(value: object) -> Optional[Decimal]:
    """Return a finite Decimal for numeric input, otherwise None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return Decimal(str(value))
    return None


def quantize_places(value: Decimal, places: int) -> Optional[Decimal]:
    """Round to ``places`` decimals; None when the result exceeds the context precision."""
    exp = Decimal(1).scaleb(-places)
    try:
        return value.quantize(exp, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None
