"""Tests for the Money value type."""

from decimal import Decimal

import pytest

from services.errors import InvalidAmount
from services.money import Money


class TestMoneyConstruction:
    def test_of_accepts_strings_ints_and_decimals(self):
        assert Money.of("15000").cents == 1_500_000
        assert Money.of(15000).cents == 1_500_000
        assert Money.of(Decimal("12.50")).cents == 1250

    def test_of_rounds_third_decimal_half_up(self):
        assert Money.of("0.005").cents == 1
        assert Money.of("0.004").cents == 0

    def test_rejects_float(self):
        with pytest.raises(InvalidAmount):
            Money.of(10.5)

    def test_rejects_negative_unless_signed(self):
        with pytest.raises(InvalidAmount):
            Money.of("-1")
        assert Money.of("-1", signed=True).cents == -100

    def test_rejects_garbage(self):
        with pytest.raises(InvalidAmount):
            Money.of("ten")
        with pytest.raises(InvalidAmount):
            Money.of("NaN")

    def test_minor_units_must_be_int(self):
        with pytest.raises(InvalidAmount):
            Money(Decimal("1"))
        with pytest.raises(InvalidAmount):
            Money(True)


class TestMoneyArithmetic:
    def test_add_and_subtract(self):
        total = Money.of("100") + Money.of("0.50") - Money.of("20")
        assert total == Money.of("80.50")
        assert total.amount == Decimal("80.50")

    def test_currency_mismatch_is_rejected(self):
        with pytest.raises(InvalidAmount):
            Money.of("1", "IDR") + Money.of("1", "USD")
        with pytest.raises(InvalidAmount):
            Money.of("1", "IDR") < Money.of("1", "USD")

    def test_multiply_by_quantity(self):
        assert Money.of("12500") * 3 == Money.of("37500")
        assert 2 * Money.of("1.25") == Money.of("2.50")

    def test_multiply_by_money_or_decimal_is_a_type_error(self):
        with pytest.raises(TypeError):
            Money.of("1") * Money.of("2")
        with pytest.raises(TypeError):
            Money.of("1") * Decimal("1.5")

    def test_percent_rounds_half_up(self):
        assert Money.of("80000").percent(10) == Money.of("8000")
        # 10% of 0.05 is 0.005, which rounds up to one minor unit
        assert Money.of("0.05").percent("10") == Money(1)
        assert Money.of("0.04").percent("10") == Money(0)

    def test_negative_percent_is_rejected(self):
        with pytest.raises(InvalidAmount):
            Money.of("50000").percent("-50")

    def test_subtraction_can_go_negative(self):
        diff = Money.of("5") - Money.of("7")
        assert diff.is_negative()
        with pytest.raises(InvalidAmount):
            diff.ensure_non_negative()

    def test_min_max(self):
        a, b = Money.of("10"), Money.of("20")
        assert a.min(b) is a
        assert a.max(b) is b


class TestMoneyDisplay:
    def test_format(self):
        assert Money.of("15000").format() == "IDR 15,000.00"
        assert str(Money.of("-2.5", signed=True)) == "-IDR 2.50"

    def test_zero(self):
        assert Money.zero().is_zero()
        assert Money.zero("USD").currency == "USD"
