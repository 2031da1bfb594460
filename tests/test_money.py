from decimal import Decimal

import pytest

from app.shared.utils.money import format_currency, format_currency_ar, parse_currency, to_decimal


class TestToDecimal:

    def test_rounds_to_cents(self):
        assert to_decimal("10.005") == Decimal("10.01")
        assert to_decimal(3) == Decimal("3.00")

    def test_none_and_empty_are_zero(self):
        assert to_decimal(None) == Decimal("0.00")
        assert to_decimal("") == Decimal("0.00")

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            to_decimal("abc")


class TestFormatting:

    def test_default_format(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(None) == "$0.00"
        assert format_currency(-50) == "-$50.00"

    def test_argentine_format(self):
        assert format_currency_ar(1234567.89) == "$1.234.567,89"
        assert format_currency_ar(0) == "$0,00"

    @pytest.mark.parametrize("amount", ["0.01", "99.99", "1500.00", "123456.78", "2500000.50"])
    def test_format_then_parse_keeps_amount(self, amount):
        value = Decimal(amount)
        assert parse_currency(format_currency(value)) == value
        assert parse_currency(format_currency_ar(value)) == value


class TestParseCurrency:

    def test_thousands_with_single_separator(self):
        assert parse_currency("1.000") == Decimal("1000.00")
        assert parse_currency("1,000") == Decimal("1000.00")

    def test_single_separator_as_decimal(self):
        assert parse_currency("12,5") == Decimal("12.50")
        assert parse_currency("$ 99.9") == Decimal("99.90")

    def test_negative_and_blank(self):
        assert parse_currency("-$1.234,56") == Decimal("-1234.56")
        assert parse_currency("  ") == Decimal("0.00")
        assert parse_currency(None) == Decimal("0.00")
