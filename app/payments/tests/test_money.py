"""
Tests for major/minor unit conversion.
"""

from decimal import Decimal

import pytest

from payments.money import format_major, major_to_minor, minor_to_major


class TestMajorToMinor:
    """Tests for major_to_minor."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (Decimal("20.00"), 2000),
            (Decimal("0.01"), 1),
            (Decimal("19.999"), 1999),
            (Decimal("0.009"), 0),
            ("15", 1500),
            (3, 300),
        ],
    )
    def test_converts_and_truncates(self, amount, expected):
        """Multiplies by 100 and truncates any remaining fraction."""
        assert major_to_minor(amount) == expected

    def test_returns_int(self):
        assert isinstance(major_to_minor(Decimal("1.50")), int)


class TestMinorToMajor:
    """Tests for minor_to_major and format_major."""

    def test_converts_to_two_places(self):
        assert minor_to_major(3000) == Decimal("30.00")
        assert minor_to_major(1) == Decimal("0.01")
        assert str(minor_to_major(500000)) == "5000.00"

    def test_format_major(self):
        """Renders the values used in error messages."""
        assert format_major(1500) == "15.00"
        assert format_major(1000) == "10.00"
        assert format_major(5) == "0.05"

    def test_minor_round_trip_is_exact(self):
        """Any whole number of cents survives a round trip."""
        for cents in (0, 1, 99, 100, 2000, 123456789):
            assert major_to_minor(minor_to_major(cents)) == cents
