"""
Tests for currency parsing and formatting.
"""
from decimal import Decimal

import pytest

from billing_contracts.domain.formatting import (
    format_currency, from_cents, quantize_money, to_cents, unformat_currency
)


class TestUnformatCurrency:

    @pytest.mark.parametrize("raw, expected", [
        ("$100.00", Decimal("100.00")),
        ("20,100.00", Decimal("20100.00")),
        ("20 100.00", Decimal("20100.00")),
        ("$ 1,234.5", Decimal("1234.5")),
        ("-50", Decimal("-50")),
        (75, Decimal("75")),
        (12.5, Decimal("12.5")),
        (Decimal("3.10"), Decimal("3.10")),
    ])
    def test_parses_user_input(self, raw, expected):
        assert unformat_currency(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "$"])
    def test_blank_is_none(self, raw):
        assert unformat_currency(raw) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError, match="not a valid currency amount"):
            unformat_currency("ten dollars")


class TestCents:

    def test_to_cents_rounds_half_up(self):
        assert to_cents("$10.005") == 1001
        assert to_cents("20,100.00") == 2010000
        assert to_cents(None) is None

    def test_from_cents(self):
        assert from_cents(2010000) == Decimal("20100.00")
        assert from_cents(None) is None

    def test_quantize_money(self):
        assert quantize_money(Decimal("1.234")) == Decimal("1.23")
        assert quantize_money(5) == Decimal("5.00")


class TestFormatCurrency:

    def test_format_positive(self):
        assert format_currency(Decimal("20100")) == "$20,100.00"

    def test_format_negative(self):
        assert format_currency(Decimal("-1200.5")) == "-$1,200.50"

    def test_format_none(self):
        assert format_currency(None) == ""
