import pytest

from ridefx.services.currency.format import (
    DisplayPrice,
    convert_amount,
    format_amount,
    format_display_price,
    format_price,
    format_price_range,
    parse_formatted_price,
)
from ridefx.services.currency.metadata import SUPPORTED_CURRENCY_CODES

RATES = {"AED": 1.0, "USD": 0.27, "EUR": 0.25, "JPY": 40.74, "KWD": 0.084}


class TestConvertAmount:
    """Tests for conversion through the base currency."""

    def test_base_to_target(self):
        assert convert_amount(100, "AED", "USD", RATES) == 27.0

    def test_target_to_base(self):
        assert convert_amount(27, "USD", "AED", RATES) == 100.0

    def test_cross_rate(self):
        # 100 USD -> 370.37 AED -> 92.59 EUR
        assert convert_amount(100, "USD", "EUR", RATES) == 92.59

    def test_same_currency_is_identity(self):
        assert convert_amount(1.23456, "USD", "USD", RATES) == 1.23456

    @pytest.mark.parametrize("code", sorted(SUPPORTED_CURRENCY_CODES))
    @pytest.mark.parametrize("amount", [1.23456, -7.5, 0.0001, 4074.6])
    def test_identity_holds_without_rates(self, code, amount):
        # No rounding either, even for zero-decimal currencies
        assert convert_amount(amount, code, code, {}) == amount

    @pytest.mark.parametrize("amount", [1e30, 1.7e308, -1e30])
    def test_results_too_large_to_round_convert_to_zero(self, amount):
        assert convert_amount(amount, "AED", "USD", RATES) == 0.0

    @pytest.mark.parametrize("amount", [None, float("nan"), float("inf"), float("-inf"), "12", 0])
    def test_invalid_amounts_convert_to_zero(self, amount):
        assert convert_amount(amount, "AED", "USD", RATES) == 0

    def test_missing_rate_counts_as_one(self):
        assert convert_amount(10, "AED", "GBP", RATES) == 10.0

    @pytest.mark.parametrize("bad_rate", [0, -2, None, float("nan")])
    def test_non_positive_rate_counts_as_one(self, bad_rate):
        assert convert_amount(10, "AED", "USD", {"USD": bad_rate}) == 10.0

    def test_rounds_to_target_decimal_places(self):
        assert convert_amount(1, "AED", "JPY", RATES) == 41.0
        assert convert_amount(100, "AED", "JPY", RATES) == 4074.0
        assert convert_amount(10, "AED", "KWD", RATES) == 0.84

    @pytest.mark.parametrize(
        "amount, code, expected",
        [
            (1.005, "USD", 1.01),
            (1.015, "USD", 1.02),
            (-1.005, "USD", -1.01),
            (0.5, "JPY", 1.0),
            (2.5, "JPY", 3.0),
            (1.0005, "KWD", 1.001),
        ],
    )
    def test_tie_vectors_round_half_away_from_zero(self, amount, code, expected):
        assert convert_amount(amount, "AED", code, {code: 1.0}) == expected


class TestFormatAmount:
    def test_symbol_before(self):
        assert format_amount(27, "USD") == "$27.00"
        assert format_amount(1234.5, "USD") == "$1,234.50"

    def test_symbol_after(self):
        assert format_amount(1234.5, "EUR") == "1,234.50 €"
        assert format_amount(100, "AED") == "100.00 د.إ"

    def test_show_code(self):
        assert format_amount(27, "USD", show_code=True) == "$27.00 USD"

    def test_decimal_places_follow_currency(self):
        assert format_amount(4074, "JPY") == "¥4,074"
        assert format_amount(1.5, "KWD") == "1.500 د.ك"
        assert format_amount(2.5, "JPY") == "¥3"
        assert format_amount(1.005, "USD") == "$1.01"

    @pytest.mark.parametrize("amount", [None, float("nan"), float("inf"), "abc"])
    def test_invalid_amount_formats_as_zero(self, amount):
        assert format_amount(amount, "USD") == "$0.00"

    @pytest.mark.parametrize("amount", [1e26, 1e27, 1e30, 1.7e308])
    def test_amounts_too_large_to_round_format_as_zero(self, amount):
        assert format_amount(amount, "USD") == "$0.00"
        assert format_amount(amount * 1000, "JPY") == "¥0"

    def test_largest_roundable_amount(self):
        assert format_amount(1e25, "USD") == "$10,000,000,000,000,000,000,000,000.00"

    def test_negative_amount(self):
        assert format_amount(-5, "USD") == "$-5.00"

    def test_unknown_code_uses_base_formatting(self):
        assert format_amount(5, "XYZ") == "5.00 د.إ"
        assert format_amount(5, "XYZ", show_code=True) == "5.00 د.إ XYZ"

    def test_locale_grouping(self):
        assert format_amount(1234.5, "EUR", locale="de-DE") == "1.234,50 €"
        assert format_amount(1234.5, "USD", locale="en_US") == "$1,234.50"

    def test_indian_grouping(self):
        assert format_amount(1234567, "INR", locale="en-IN") == "₹12,34,567.00"

    def test_unknown_locale_falls_back(self):
        assert format_amount(1234.5, "USD", locale="xx-YY") == "$1,234.50"


class TestFormatPrice:
    def test_end_to_end(self):
        assert format_price(100, "USD", {"AED": 1.0, "USD": 0.27}) == "$27.00"

    def test_source_currency(self):
        assert format_price(100, "EUR", RATES, source_currency="USD") == "92.59 €"

    def test_show_code_and_locale(self):
        assert format_price(10000, "EUR", RATES, show_code=True, locale="de-DE") == "2.500,00 € EUR"

    def test_range(self):
        assert format_price_range(100, 200, "USD", RATES) == "$27.00 - $54.00"

    def test_display_price(self):
        assert format_display_price(100, "USD", RATES) == DisplayPrice(
            display_amount="$27.00", original_amount="100.00 د.إ", is_converted=True
        )
        assert format_display_price(100, "AED", RATES).is_converted is False


class TestParseFormattedPrice:
    def test_round_trip(self):
        assert parse_formatted_price(format_amount(1234.5, "USD")) == 1234.5
        assert parse_formatted_price(format_amount(1234.5, "AED")) == 1234.5

    def test_single_comma_is_decimal(self):
        assert parse_formatted_price("12,50 €") == 12.5

    def test_negative(self):
        assert parse_formatted_price("-$5.00") == -5.0

    @pytest.mark.parametrize("text", ["", "abc", "$", None, 12])
    def test_unparseable(self, text):
        assert parse_formatted_price(text) is None

    def test_zero_decimal_grouping(self):
        assert parse_formatted_price(format_amount(4074, "JPY")) == 4074.0
        assert parse_formatted_price("¥1,234,567") == 1234567.0

    def test_symbol_dots_are_ignored(self):
        assert parse_formatted_price("S/.1,234.50") == 1234.5
        assert parse_formatted_price(format_amount(-5, "PEN")) == -5.0
        assert parse_formatted_price("12,50 د.إ") == 12.5

    def test_comma_decimal_with_grouping_is_ambiguous(self):
        # Known limitation for ","-decimal locales: grouping dots are read as decimals
        assert parse_formatted_price("1.234,50 €") == 1.2345
