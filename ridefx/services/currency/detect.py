"""Guess a visitor's currency from the Accept-Language header.

Country subtags win over language subtags ("en-GB" is GBP, plain "en" is
USD). Nothing here raises: malformed headers degrade to an empty locale list
and, finally, to the base currency.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from ridefx.models.constants import DEFAULT_CURRENCY_CODE


def _countries(currency: str, *codes: str) -> Dict[str, str]:
    return {c: currency for c in codes}


COUNTRY_TO_CURRENCY: Dict[str, str] = {
    **_countries(
        "USD", "US", "AS", "EC", "SV", "GU", "MH", "FM", "MP", "PW", "PA", "PR", "TC", "VG", "VI"
    ),
    **_countries(
        "EUR",
        "AT", "BE", "HR", "CY", "EE", "FI", "FR", "DE", "GR", "IE", "IT", "LV",
        "LT", "LU", "MT", "NL", "PT", "SK", "SI", "ES", "AD", "MC", "SM", "VA",
    ),
    # UK is not ISO 3166 but shows up in hand-written locales
    **_countries("GBP", "GB", "UK", "IM", "JE", "GG"),
    **_countries("AED", "AE"),
    **_countries("AUD", "AU", "CX", "CC", "HM", "NF", "KI", "NR", "TV"),
    **_countries("CAD", "CA"),
    **_countries("CHF", "CH", "LI"),
    **_countries("SAR", "SA"),
    **_countries("SGD", "SG"),
    **_countries("INR", "IN"),
    **_countries("JPY", "JP"),
}

# Used only when the locale carries no (known) country
LANGUAGE_TO_CURRENCY: Dict[str, str] = {
    "en": "USD",
    "de": "EUR",
    "fr": "EUR",
    "es": "EUR",
    "it": "EUR",
    "pt": "EUR",
    "nl": "EUR",
    "ar": "AED",
    "ja": "JPY",
    "hi": "INR",
    "zh": "USD",
}

_SUBTAG_SEP = re.compile(r"[-_]")


def _quality(params: List[str]) -> float:
    for param in params:
        key, _, value = param.strip().partition("=")
        if key.strip().lower() == "q":
            try:
                q = float(value.strip())
            except ValueError:
                return 0.0
            return q if q == q else 0.0  # NaN sorts last
    return 1.0


def parse_accept_language(header: Optional[str]) -> List[str]:
    """Locales from an Accept-Language header, highest ``q`` first.

    Ties keep header order; items with an unparseable ``q`` rank as 0.
    """
    if not header:
        return []
    items: List[Tuple[str, float]] = []
    for part in header.split(","):
        locale, *params = part.strip().split(";")
        locale = locale.strip()
        if not locale:
            continue
        items.append((locale, _quality(params)))
    # sorted() is stable, so equal weights keep their original order
    return [locale for locale, _ in sorted(items, key=lambda item: -item[1])]


def extract_country_code(locale: str) -> Optional[str]:
    parts = _SUBTAG_SEP.split(locale)
    if len(parts) >= 2 and parts[1]:
        return parts[1].upper()
    return None


def extract_language_code(locale: str) -> str:
    return _SUBTAG_SEP.split(locale)[0].lower()


def detect_currency_from_locale(locale: str) -> Optional[str]:
    country = extract_country_code(locale)
    if country and country in COUNTRY_TO_CURRENCY:
        return COUNTRY_TO_CURRENCY[country]
    return LANGUAGE_TO_CURRENCY.get(extract_language_code(locale))


def detect_currency_from_accept_language(header: Optional[str]) -> str:
    for locale in parse_accept_language(header):
        currency = detect_currency_from_locale(locale)
        if currency:
            return currency
    return DEFAULT_CURRENCY_CODE
