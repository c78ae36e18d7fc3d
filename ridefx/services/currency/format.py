"""Conversion and display formatting for prices stored in the base currency.

All functions are pure. Rates are "units of X per 1 AED", so converting goes
through the base: ``amount / rate[from] * rate[to]``. Results are rounded half
away from zero on the decimal value (see `ridefx.services.money`), then
rendered with Babel's locale grouping and the currency's own symbol placement.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
import logging
import re
from typing import Mapping, Optional

from babel import Locale, UnknownLocaleError
from babel.numbers import format_decimal

from ridefx.models.constants import BASE_CURRENCY
from ridefx.services.money import quantize_places, to_decimal
from .metadata import get_currency_metadata, get_decimal_places

logger = logging.getLogger("ridefx.format")

DEFAULT_LOCALE = "en-US"
_FALLBACK_LOCALE = Locale.parse("en_US")

_NON_NUMERIC = re.compile(r"[^\d.,-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_GROUPED_THOUSANDS = re.compile(r",\d{3}$")


@dataclass(frozen=True)
class DisplayPrice:
    display_amount: str
    original_amount: str
    is_converted: bool


@lru_cache(maxsize=64)
def _babel_locale(locale: str) -> Locale:
    try:
        return Locale.parse(locale.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError):
        logger.warning("unknown locale %r, formatting with %s", locale, DEFAULT_LOCALE)
        return _FALLBACK_LOCALE


def _number_pattern(locale: Locale, places: int) -> str:
    # Keep the locale's grouping (e.g. en_IN "#,##,##0") but pin the fraction digits
    base = locale.decimal_formats[None].pattern.split(";")[0]
    integer_part = base.split(".")[0]
    return integer_part + ("." + "0" * places if places > 0 else "")


def _rate(rates: Mapping[str, float], code: str) -> Decimal:
    value = to_decimal(rates.get(code))
    if value is None or value <= 0:
        return Decimal(1)
    return value


def convert_amount(
    amount: object, from_code: str, to_code: str, rates: Mapping[str, float]
) -> float:
    """Convert ``amount`` between currencies via the base currency.

    Missing, NaN, infinite or non-numeric amounts convert to 0, as do results
    too large to round to the target currency. Missing or non-positive rates
    count as 1.0.
    """
    value = to_decimal(amount)
    if value is None or value == 0:
        return 0.0
    if from_code == to_code:
        return float(value)
    converted = value / _rate(rates, from_code) * _rate(rates, to_code)
    rounded = quantize_places(converted, get_decimal_places(to_code))
    return float(rounded) if rounded is not None else 0.0


def format_amount(
    amount: object,
    code: str,
    show_code: bool = False,
    locale: Optional[str] = DEFAULT_LOCALE,
) -> str:
    """Render an amount already expressed in ``code``.

    >>> format_amount(27, "USD")
    '$27.00'
    >>> format_amount(1234.5, "EUR", show_code=True)
    '1,234.50 € EUR'
    """
    meta = get_currency_metadata(code)
    value = to_decimal(amount)
    rounded = quantize_places(value, meta.decimal_places) if value is not None else None
    if rounded is None:
        # Invalid or out-of-range amounts render as zero
        rounded = Decimal(0)
    babel_locale = _babel_locale(locale or DEFAULT_LOCALE)
    number = format_decimal(
        rounded,
        format=_number_pattern(babel_locale, meta.decimal_places),
        locale=babel_locale,
    )
    if meta.symbol_position == "after":
        result = f"{number} {meta.symbol}"
    else:
        result = f"{meta.symbol}{number}"
    if show_code:
        result = f"{result} {code}"
    return result


def format_price(
    amount: object,
    target_code: str,
    rates: Mapping[str, float],
    source_currency: str = BASE_CURRENCY,
    show_code: bool = False,
    locale: Optional[str] = DEFAULT_LOCALE,
) -> str:
    converted = convert_amount(amount, source_currency, target_code, rates)
    return format_amount(converted, target_code, show_code=show_code, locale=locale)


def format_price_range(
    min_amount: object,
    max_amount: object,
    target_code: str,
    rates: Mapping[str, float],
    locale: Optional[str] = DEFAULT_LOCALE,
) -> str:
    low = format_price(min_amount, target_code, rates, locale=locale)
    high = format_price(max_amount, target_code, rates, locale=locale)
    return f"{low} - {high}"


def format_display_price(
    amount_in_base: object, target_code: str, rates: Mapping[str, float]
) -> DisplayPrice:
    """Converted price plus the base-currency amount that will actually be charged."""
    return DisplayPrice(
        display_amount=format_price(amount_in_base, target_code, rates),
        original_amount=format_price(amount_in_base, BASE_CURRENCY, rates),
        is_converted=target_code != BASE_CURRENCY,
    )


def parse_formatted_price(text: object) -> Optional[float]:
    """Best-effort inverse of `format_amount` for "." decimal locales.

    A single "," with no "." is read as a decimal comma unless exactly three
    digits follow it (zero-decimal grouping such as "¥4,074"); otherwise commas
    are grouping separators. A "." left over from the symbol (PEN's "S/.")
    is dropped when another "." follows, as is a trailing one ("د.إ").
    """
    if not isinstance(text, str):
        return None
    cleaned = _NON_NUMERIC.sub("", text).rstrip(".")
    if cleaned.startswith(".") and cleaned.count(".") > 1:
        cleaned = cleaned[1:]
    if "," in cleaned:
        lone_comma = "." not in cleaned and cleaned.count(",") == 1
        if lone_comma and not _GROUPED_THOUSANDS.search(cleaned):
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group())
