"""Unit tests for numeric input normalization."""

from decimal import Decimal

import pytest

from load_pricing.pricing.number_normalizer import coerce_decimal, coerce_rate, normalize_decimal


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1234.56", Decimal("1234.56")),
        ("1.234,56", Decimal("1234.56")),
        ("1 234 567,89", Decimal("1234567.89")),
        ("12,5", Decimal("12.5")),
        ("30.125", Decimal("30.125")),
        ("1.234.567", Decimal("1234567")),
        (".5", Decimal("0.5")),
        ("₺ 1.234,50", Decimal("1234.50")),
        ("1.234,00 TL", Decimal("1234.00")),
        ("$500", Decimal("500")),
        ("-1.234,00", Decimal("-1234.00")),
        ("1.234,00-", Decimal("-1234.00")),
    ],
)
def test_normalize_decimal(text, expected):
    assert normalize_decimal(text) == expected


@pytest.mark.parametrize("text", ["", " ", "12..3", "abc", "12,34,56", "₺"])
def test_normalize_decimal_rejects_invalid(text):
    with pytest.raises(ValueError):
        normalize_decimal(text)


class TestCoerceDecimal:
    """Malformed input never raises."""

    def test_passes_decimal_through(self):
        assert coerce_decimal(Decimal("2.50")) == Decimal("2.50")

    def test_int_and_float(self):
        assert coerce_decimal(3) == Decimal("3")
        assert coerce_decimal(0.1) == Decimal("0.1")

    def test_text(self):
        assert coerce_decimal("1.234,56") == Decimal("1234.56")

    @pytest.mark.parametrize("value", [None, "", "abc", "1,2,3", float("nan"), True, object()])
    def test_malformed_defaults_to_zero(self, value):
        assert coerce_decimal(value) == Decimal("0")

    def test_custom_default(self):
        assert coerce_decimal("x", Decimal("1")) == Decimal("1")


class TestCoerceRate:
    """Exchange rates fall back to 1."""

    @pytest.mark.parametrize("value", [None, "", "abc", "0", 0, "-3"])
    def test_unusable_rate_is_one(self, value):
        assert coerce_rate(value) == Decimal("1")

    def test_valid_rate(self):
        assert coerce_rate("34,2150") == Decimal("34.2150")
