"""Static currency metadata used for formatting and code validation.

Symbol placement is a property of the currency, not of the numeral locale:
"27.00 €" is rendered the same way whatever grouping locale is in use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from ridefx.models.constants import BASE_CURRENCY


@dataclass(frozen=True)
class CurrencyMeta:
    name: str
    symbol: str
    decimal_places: int
    symbol_position: str  # 'before' | 'after'


def _m(name: str, symbol: str, decimals: int, position: str = "before") -> CurrencyMeta:
    return CurrencyMeta(name, symbol, decimals, position)


CURRENCY_METADATA: Dict[str, CurrencyMeta] = {
    # Core set
    "AED": _m("UAE Dirham", "د.إ", 2, "after"),
    "USD": _m("US Dollar", "$", 2),
    "EUR": _m("Euro", "€", 2, "after"),
    "GBP": _m("British Pound", "£", 2),
    "AUD": _m("Australian Dollar", "A$", 2),
    "CAD": _m("Canadian Dollar", "C$", 2),
    "CHF": _m("Swiss Franc", "CHF", 2, "after"),
    "SAR": _m("Saudi Riyal", "﷼", 2, "after"),
    "SGD": _m("Singapore Dollar", "S$", 2),
    "INR": _m("Indian Rupee", "₹", 2),
    "JPY": _m("Japanese Yen", "¥", 0),
    # Asia
    "CNY": _m("Chinese Yuan", "¥", 2),
    "HKD": _m("Hong Kong Dollar", "HK$", 2),
    "KRW": _m("South Korean Won", "₩", 0),
    "MYR": _m("Malaysian Ringgit", "RM", 2),
    "THB": _m("Thai Baht", "฿", 2),
    "IDR": _m("Indonesian Rupiah", "Rp", 0),
    "PHP": _m("Philippine Peso", "₱", 2),
    "TWD": _m("New Taiwan Dollar", "NT$", 2),
    "VND": _m("Vietnamese Dong", "₫", 0, "after"),
    "PKR": _m("Pakistani Rupee", "₨", 2),
    "BDT": _m("Bangladeshi Taka", "৳", 2),
    "LKR": _m("Sri Lankan Rupee", "Rs", 2),
    # Europe & Oceania
    "NZD": _m("New Zealand Dollar", "NZ$", 2),
    "SEK": _m("Swedish Krona", "kr", 2, "after"),
    "NOK": _m("Norwegian Krone", "kr", 2, "after"),
    "DKK": _m("Danish Krone", "kr", 2, "after"),
    "PLN": _m("Polish Zloty", "zł", 2, "after"),
    "CZK": _m("Czech Koruna", "Kč", 2, "after"),
    "HUF": _m("Hungarian Forint", "Ft", 0, "after"),
    "RON": _m("Romanian Leu", "lei", 2, "after"),
    "BGN": _m("Bulgarian Lev", "лв", 2, "after"),
    "HRK": _m("Croatian Kuna", "kn", 2, "after"),
    "ISK": _m("Icelandic Krona", "kr", 0, "after"),
    "TRY": _m("Turkish Lira", "₺", 2),
    "RUB": _m("Russian Ruble", "₽", 2, "after"),
    # Latin America
    "BRL": _m("Brazilian Real", "R$", 2),
    "MXN": _m("Mexican Peso", "MX$", 2),
    "CLP": _m("Chilean Peso", "CLP$", 0),
    "COP": _m("Colombian Peso", "COL$", 0),
    "ARS": _m("Argentine Peso", "AR$", 2),
    "PEN": _m("Peruvian Sol", "S/.", 2),
    # Africa & Middle East
    "ZAR": _m("South African Rand", "R", 2),
    "ILS": _m("Israeli New Shekel", "₪", 2),
    "EGP": _m("Egyptian Pound", "E£", 2),
    "KWD": _m("Kuwaiti Dinar", "د.ك", 3, "after"),
    "BHD": _m("Bahraini Dinar", ".د.ب", 3, "after"),
    "OMR": _m("Omani Rial", "﷼", 3, "after"),
    "QAR": _m("Qatari Riyal", "﷼", 2, "after"),
    "JOD": _m("Jordanian Dinar", "د.ا", 3, "after"),
}

SUPPORTED_CURRENCY_CODES: FrozenSet[str] = frozenset(CURRENCY_METADATA)

_UNKNOWN_FLAG = "\U0001F3F3\uFE0F"
_REGIONAL_INDICATOR_A = 0x1F1E6


def is_valid_currency_code(code: Optional[str]) -> bool:
    return isinstance(code, str) and code in CURRENCY_METADATA


def get_currency_metadata(code: Optional[str]) -> CurrencyMeta:
    """Metadata for ``code``; unknown codes format like the base currency."""
    return CURRENCY_METADATA.get(code or "", CURRENCY_METADATA[BASE_CURRENCY])


def get_currency_symbol(code: str) -> str:
    meta = CURRENCY_METADATA.get(code)
    return meta.symbol if meta else code


def get_decimal_places(code: str) -> int:
    meta = CURRENCY_METADATA.get(code)
    return meta.decimal_places if meta else 2


def get_currency_flag(code: str) -> str:
    # ISO 4217 codes start with the issuing region (EUR -> EU), which maps onto
    # the regional-indicator pair of the flag emoji.
    if code not in CURRENCY_METADATA:
        return _UNKNOWN_FLAG
    return "".join(chr(_REGIONAL_INDICATOR_A + ord(c) - ord("A")) for c in code[:2])


__all__ = [
    "CurrencyMeta",
    "CURRENCY_METADATA",
    "SUPPORTED_CURRENCY_CODES",
    "is_valid_currency_code",
    "get_currency_metadata",
    "get_currency_symbol",
    "get_decimal_places",
    "get_currency_flag",
]
