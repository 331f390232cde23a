"""Tests for decimal order pricing."""

from decimal import Decimal

from storefront.ordering.pricing import line_total, order_total, round_currency


class TestLineTotal:
    def test_multiplies_price_by_quantity(self):
        assert line_total(Decimal("1000.00"), 3) == Decimal("3000.00")

    def test_no_binary_float_drift(self):
        assert line_total(Decimal("0.10"), 3) == Decimal("0.30")


class TestOrderTotal:
    def test_sums_line_totals(self):
        lines = [(Decimal("19.99"), 2), (Decimal("5.01"), 1)]
        assert order_total(lines) == Decimal("44.99")

    def test_empty_is_zero(self):
        assert order_total([]) == Decimal("0.00")

    def test_many_cents_add_exactly(self):
        assert order_total([(Decimal("0.01"), 1)] * 100) == Decimal("1.00")


class TestRoundCurrency:
    def test_rounds_half_up(self):
        assert round_currency(Decimal("2.345")) == Decimal("2.35")
        assert round_currency(Decimal("2.344")) == Decimal("2.34")

    def test_keeps_two_places(self):
        assert str(round_currency(Decimal("7"))) == "7.00"
