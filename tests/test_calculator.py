"""Tests for the gold weight and total derivations."""

from decimal import Decimal

import pytest

from gold_ledger.calculator import (
    GRAMS_PER_MITHQAL,
    InvalidInput,
    derive_gold_weight,
    derive_total,
)


class TestGoldWeight:
    """Tests for derive_gold_weight."""

    def test_known_value(self):
        """50,000 at 123,000 per mithqal is 1.76089... grams."""
        weight = derive_gold_weight(Decimal("123000"), Decimal("50000"))
        assert weight == Decimal("1.761")

    def test_one_mithqal(self):
        weight = derive_gold_weight(Decimal("1000"), Decimal("1000"))
        assert weight == GRAMS_PER_MITHQAL.quantize(Decimal("0.001"))

    def test_always_three_decimals(self):
        weight = derive_gold_weight(Decimal("3"), Decimal("1"))
        assert weight.as_tuple().exponent == -3

    def test_zero_total_gives_zero_weight(self):
        assert derive_gold_weight(Decimal("123000"), Decimal("0")) == Decimal("0.000")

    def test_rounds_half_up(self):
        # 7.5 mithqal == 32.4885 g
        weight = derive_gold_weight(Decimal("1000"), Decimal("7500"))
        assert weight == Decimal("32.489")

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-1")])
    def test_non_positive_price_rejected(self, price):
        with pytest.raises(InvalidInput):
            derive_gold_weight(price, Decimal("100"))

    def test_negative_total_rejected(self):
        with pytest.raises(InvalidInput):
            derive_gold_weight(Decimal("100"), Decimal("-1"))

    def test_weight_grows_with_total(self):
        price = Decimal("123000")
        weights = [
            derive_gold_weight(price, Decimal(total))
            for total in ("10000", "50000", "250000", "1000000")
        ]
        assert weights == sorted(weights)

    def test_weight_shrinks_with_price(self):
        total = Decimal("1000000")
        weights = [
            derive_gold_weight(Decimal(price), total)
            for price in ("100000", "200000", "400000")
        ]
        assert weights == sorted(weights, reverse=True)


class TestTotal:
    """Tests for derive_total."""

    def test_product(self):
        assert derive_total(Decimal("45000000"), Decimal("2")) == Decimal("90000000")

    def test_fractional_quantity(self):
        assert derive_total(Decimal("60000"), Decimal("2.5")) == Decimal("150000")

    @pytest.mark.parametrize(
        "price,quantity",
        [
            (Decimal("0"), Decimal("1")),
            (Decimal("1"), Decimal("0")),
            (Decimal("-5"), Decimal("1")),
        ],
    )
    def test_non_positive_inputs_rejected(self, price, quantity):
        with pytest.raises(InvalidInput):
            derive_total(price, quantity)


class TestOutOfRange:
    """Inputs whose result cannot be represented."""

    def test_unrepresentable_weight_rejected(self):
        with pytest.raises(InvalidInput):
            derive_gold_weight(Decimal("1e-30"), Decimal("1e15"))

    def test_largest_accepted_answers_still_compute(self):
        weight = derive_gold_weight(Decimal("0.000001"), Decimal("999999999999999"))
        assert weight.as_tuple().exponent == -3
