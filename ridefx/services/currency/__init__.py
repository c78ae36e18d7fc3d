"""Currency subsystem: metadata, cached rates, detection, preference, formatting."""

from .detect import (
    detect_currency_from_accept_language,
    detect_currency_from_locale,
    extract_country_code,
    extract_language_code,
    parse_accept_language,
)
from .format import (
    DisplayPrice,
    convert_amount,
    format_amount,
    format_display_price,
    format_price,
    format_price_range,
    parse_formatted_price,
)
from .metadata import (
    CURRENCY_METADATA,
    SUPPORTED_CURRENCY_CODES,
    get_currency_flag,
    get_currency_metadata,
    get_currency_symbol,
    get_decimal_places,
    is_valid_currency_code,
)
from .preference import (
    ClientCookiePreferenceStore,
    CurrencyPreference,
    PreferenceStore,
    ServerCookiePreferenceStore,
    resolve_currency,
)
from .rates import FALLBACK_RATES, FetchResult, RateStore

__all__ = [
    "detect_currency_from_accept_language",
    "detect_currency_from_locale",
    "extract_country_code",
    "extract_language_code",
    "parse_accept_language",
    "DisplayPrice",
    "convert_amount",
    "format_amount",
    "format_display_price",
    "format_price",
    "format_price_range",
    "parse_formatted_price",
    "CURRENCY_METADATA",
    "SUPPORTED_CURRENCY_CODES",
    "get_currency_flag",
    "get_currency_metadata",
    "get_currency_symbol",
    "get_decimal_places",
    "is_valid_currency_code",
    "ClientCookiePreferenceStore",
    "CurrencyPreference",
    "PreferenceStore",
    "ServerCookiePreferenceStore",
    "resolve_currency",
    "FALLBACK_RATES",
    "FetchResult",
    "RateStore",
]
