"""Domain constants shared by the currency services and the data layer.

All monetary amounts stored on the platform are expressed in the base
currency; it always converts to itself at exactly 1.0.
"""

from typing import Tuple

BASE_CURRENCY: str = "AED"
DEFAULT_CURRENCY_CODE: str = "AED"

SYMBOL_POSITIONS: Tuple[str, ...] = ("before", "after")

# Preference sources reported by the resolver
SOURCE_COOKIE = "cookie"
SOURCE_BROWSER = "browser"
SOURCE_DEFAULT = "default"
