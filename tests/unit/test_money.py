"""
Unit tests for amount conversion.

Tests verify:
- Half-up rounding to minor units
- Negative and non-numeric amounts are rejected
- Round trip for two-decimal-place amounts
"""

from decimal import Decimal

import pytest

from src.domain.exceptions import InvalidAmount, InvalidRequest
from src.domain.money import from_minor_units, to_minor_units


class TestToMinorUnits:
    """Tests for to_minor_units."""

    def test_whole_amount(self) -> None:
        assert to_minor_units(Decimal("50")) == 5000

    def test_two_decimal_amount(self) -> None:
        assert to_minor_units(Decimal("50.25")) == 5025

    def test_zero(self) -> None:
        assert to_minor_units(Decimal("0")) == 0

    def test_rounds_half_up(self) -> None:
        """Half a minor unit rounds away from zero."""
        assert to_minor_units(Decimal("10.005")) == 1001
        assert to_minor_units(Decimal("10.0049")) == 1000

    def test_accepts_int_and_str(self) -> None:
        assert to_minor_units(3) == 300
        assert to_minor_units("19.99") == 1999

    def test_float_does_not_lose_a_pesewa(self) -> None:
        """19.99 as a float is 19.989999..., but must still convert to 1999."""
        assert to_minor_units(19.99) == 1999

    def test_returns_int(self) -> None:
        assert isinstance(to_minor_units(Decimal("1.50")), int)

    def test_negative_rejected(self) -> None:
        with pytest.raises(InvalidAmount):
            to_minor_units(Decimal("-0.01"))

    def test_garbage_rejected(self) -> None:
        with pytest.raises(InvalidAmount):
            to_minor_units("fifty")

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(InvalidAmount):
            to_minor_units(Decimal("Infinity"))

    def test_invalid_amount_is_invalid_request(self) -> None:
        """InvalidAmount is reported to callers as an invalid request."""
        with pytest.raises(InvalidRequest):
            to_minor_units(Decimal("-5"))


class TestFromMinorUnits:
    """Tests for from_minor_units."""

    def test_converts_to_major_units(self) -> None:
        assert from_minor_units(5000) == Decimal("50.00")

    def test_keeps_two_places(self) -> None:
        assert str(from_minor_units(5)) == "0.05"

    @pytest.mark.parametrize(
        "amount",
        ["0", "0.01", "0.10", "1", "19.99", "50.00", "1234.56", "99999.99"],
    )
    def test_round_trip(self, amount: str) -> None:
        """from_minor_units(to_minor_units(x)) == x for two-place amounts."""
        value = Decimal(amount)
        assert from_minor_units(to_minor_units(value)) == value
