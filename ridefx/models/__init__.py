"""Pydantic domain models for the RideFX currency service."""

from .constants import (
    BASE_CURRENCY,
    DEFAULT_CURRENCY_CODE,
    SYMBOL_POSITIONS,
)  # re-export
from .currency import CurrencyInfo, CurrencySetting, PreferenceOut

__all__ = [
    "BASE_CURRENCY",
    "DEFAULT_CURRENCY_CODE",
    "SYMBOL_POSITIONS",
    "CurrencyInfo",
    "CurrencySetting",
    "PreferenceOut",
]
