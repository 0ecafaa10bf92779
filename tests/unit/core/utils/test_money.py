"""
Money utility tests

Decimal <-> minor unit conversion and rounding.
"""

from decimal import Decimal

import pytest

from core.utils.money import format_amount, from_minor, to_decimal, to_minor


class TestToDecimal:
    """to_decimal tests"""

    def test_quantizes_to_cents(self) -> None:
        assert to_decimal("12.3") == Decimal("12.30")
        assert str(to_decimal(5)) == "5.00"

    def test_rounds_half_up(self) -> None:
        """Half a cent rounds away from zero"""
        assert to_decimal("0.005") == Decimal("0.01")
        assert to_decimal("2.675") == Decimal("2.68")
        assert to_decimal("-0.005") == Decimal("-0.01")

    def test_float_uses_shortest_repr(self) -> None:
        assert to_decimal(0.1) == Decimal("0.10")
        assert to_decimal(1.005) == Decimal("1.01")

    def test_none_is_zero(self) -> None:
        assert to_decimal(None) == Decimal("0.00")

    def test_strips_whitespace(self) -> None:
        assert to_decimal(" 7.5 ") == Decimal("7.50")

    @pytest.mark.parametrize("value", ["abc", "", "1,000", True])
    def test_invalid_amount(self, value) -> None:
        with pytest.raises(ValueError, match="Invalid amount"):
            to_decimal(value)


class TestMinorUnits:
    """to_minor / from_minor tests"""

    def test_to_minor(self) -> None:
        assert to_minor("12.345") == 1235
        assert to_minor(Decimal("1500")) == 150000
        assert to_minor(0) == 0

    def test_from_minor(self) -> None:
        assert from_minor(1235) == Decimal("12.35")
        assert from_minor(-50) == Decimal("-0.50")
        assert from_minor(None) == Decimal("0.00")

    def test_from_minor_keeps_two_places(self) -> None:
        assert str(from_minor(100)) == "1.00"

    def test_tenths_add_up_exactly(self) -> None:
        """0.1 + 0.2 is exactly 0.3 in minor units"""
        assert to_minor(0.1) + to_minor(0.2) == to_minor(0.3)


class TestFormatAmount:
    """format_amount tests"""

    def test_thousands_separator(self) -> None:
        assert format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_negative(self) -> None:
        assert format_amount(Decimal("-20")) == "-$20.00"

    def test_zero(self) -> None:
        assert format_amount(Decimal("0")) == "$0.00"
