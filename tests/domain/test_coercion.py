"""
Tests for lenient numeric coercion, money rounding and the Money value object.

Covers:
- to_decimal / to_int never raise on bad input
- Oversized magnitudes coerced to zero
- round_money half-up behaviour
- Money construction and same-currency arithmetic
"""

from decimal import Decimal

import pytest

from coffee_engines.valuation import contract_value
from coffee_kernel.domain.models import ShipmentLot
from coffee_kernel.domain.values import Money, round_money, to_decimal, to_int


class TestToDecimal:
    """Raw input is coerced, never rejected."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, Decimal("0")),
            ("", Decimal("0")),
            ("   ", Decimal("0")),
            ("abc", Decimal("0")),
            (True, Decimal("0")),
            ("NaN", Decimal("0")),
            ("Infinity", Decimal("0")),
            (float("inf"), Decimal("0")),
            ("45.45", Decimal("45.45")),
            (" 12 ", Decimal("12")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
            (Decimal("-3.5"), Decimal("-3.5")),
        ],
    )
    def test_coercion(self, raw, expected):
        assert to_decimal(raw) == expected

    def test_float_goes_through_str(self):
        """0.1 must not carry binary float noise."""
        assert to_decimal(0.1) + to_decimal(0.2) == Decimal("0.3")

    def test_to_int_truncates(self):
        assert to_int("7.9") == 7
        assert to_int("x") == 0
        assert to_int(None) == 0


class TestOversizedInput:
    """Absurd magnitudes are treated like garbage text."""

    @pytest.mark.parametrize("raw", ["9e999990", "1e13", "-1e20", 10**40])
    def test_to_decimal_zeroes_huge_values(self, raw):
        assert to_decimal(raw) == Decimal("0")

    def test_to_int_does_not_overflow(self):
        assert to_int("1e999999999") == 0

    def test_lot_bag_count_coerced_to_zero(self):
        assert ShipmentLot(id="l", unit_count="1e999999999").unit_count == 0

    def test_contract_value_stays_finite(self):
        lot = ShipmentLot(id="l", weight_kg="9e999990", settled_price="1e100")
        assert contract_value([lot]) == Decimal("0")

    def test_large_realistic_values_preserved(self):
        assert to_decimal("999999999999.99") == Decimal("999999999999.99")
        assert to_decimal("-250000000") == Decimal("-250000000")

    def test_rounding_large_product(self):
        lot = ShipmentLot(id="l", weight_kg="999999999999", settled_price="999999999999")
        assert round_money(contract_value([lot])) > Decimal("0")


class TestRoundMoney:

    def test_half_up(self):
        assert round_money(Decimal("1.03625")) == Decimal("1.04")
        assert round_money(Decimal("0.005")) == Decimal("0.01")

    def test_negative_half_up_away_from_zero(self):
        assert round_money(Decimal("-41.455")) == Decimal("-41.46")

    def test_bad_input_rounds_to_zero(self):
        assert round_money("oops") == Decimal("0.00")


class TestMoney:

    def test_of_string(self):
        m = Money.of("100.50")
        assert m.amount == Decimal("100.50")
        assert m.currency == "USD"

    def test_currency_normalized(self):
        assert Money.of("1", "usd").currency == "USD"

    def test_invalid_currency(self):
        with pytest.raises(ValueError):
            Money.of("1", "DOLLARS")

    def test_arithmetic(self):
        total = Money.of("10") + Money.of("2.5") - Money.of("0.5")
        assert total == Money.of("12.0")
        assert Money.of("-1").is_negative

    def test_mixed_currency_rejected(self):
        with pytest.raises(ValueError):
            Money.of("1", "USD") + Money.of("1", "EUR")

    def test_non_money_operand_rejected(self):
        with pytest.raises(TypeError):
            Money.of("1") + Decimal("1")

    def test_round(self):
        assert Money.of("1.03625").round() == Money.of("1.04")

    def test_zero(self):
        assert Money.zero().is_zero
