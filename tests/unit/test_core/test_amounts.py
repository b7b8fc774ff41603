#!/usr/bin/env python3
"""Tests for amount coercion and display formatting."""

import pytest

from ledger.core.amounts import format_amount, parse_amount, to_amount, to_magnitude


class TestParseAmount:
    """Test parsing of user- and storage-supplied amounts."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (300, 300.0),
            (12.5, 12.5),
            ("1,234.50", 1234.5),
            ("$45.99", 45.99),
            (" 12 ", 12.0),
            ("-120", -120.0),
            (0, 0.0),
        ],
    )
    def test_numeric_values_parse(self, value, expected):
        assert parse_amount(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, True, False, "", "   ", "abc", "12abc", float("nan"), float("inf"), [1], {}])
    def test_non_numeric_values_return_none(self, value):
        """Test garbage is reported as not-a-number instead of raising."""
        assert parse_amount(value) is None


class TestCoercion:
    """Test lenient coercion used by the normalizer."""

    def test_to_amount_defaults_to_zero(self):
        assert to_amount("abc") == 0.0
        assert to_amount(None) == 0.0
        assert to_amount("7.25") == 7.25

    def test_to_amount_custom_default(self):
        assert to_amount("abc", default=1.0) == 1.0

    def test_to_magnitude_drops_sign(self):
        assert to_magnitude(-42) == 42.0
        assert to_magnitude("-1,000") == 1000.0
        assert to_magnitude("garbage") == 0.0


class TestFormatAmount:
    """Test whole-unit display formatting."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (86430, "THB 86,430"),
            (1234.5, "THB 1,235"),
            (0, "THB 0"),
            (-12.6, "-THB 13"),
            (-0.2, "THB 0"),
            ("garbage", "THB 0"),
        ],
    )
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_format_amount_custom_currency(self):
        assert format_amount(1500, "USD") == "USD 1,500"
