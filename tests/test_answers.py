"""Tests for dialog answer parsing."""

from decimal import Decimal

import pytest

from gold_ledger.conversation import COIN_OPTIONS, CURRENCY_OPTIONS, ITEM_KIND_OPTIONS
from gold_ledger.models import CoinType, CurrencyCode, ItemKind
from gold_ledger.validation import (
    AnswerRejected,
    InvalidChoice,
    InvalidNumericInput,
    normalize_number_text,
    parse_choice,
    parse_free_text,
    parse_number,
)


class TestParseNumber:
    """Tests for numeric answers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("123000", Decimal("123000")),
            ("123,000", Decimal("123000")),
            (" 50 000 ", Decimal("50000")),
            ("1.5", Decimal("1.5")),
            ("۱۲۳۰۰۰", Decimal("123000")),
            ("۱۲۳٬۰۰۰", Decimal("123000")),
            ("١٢٣", Decimal("123")),
            ("۲٫۵", Decimal("2.5")),
        ],
    )
    def test_accepts(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.parametrize("text", ["abc", "12abc", "1.2.3", "NaN", "Infinity"])
    def test_rejects_non_numbers(self, text):
        with pytest.raises(InvalidNumericInput) as exc_info:
            parse_number(text)
        assert exc_info.value.message.startswith("❌")
        assert exc_info.value.raw_text == text

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_rejects_empty(self, text):
        with pytest.raises(InvalidNumericInput):
            parse_number(text)

    def test_rejects_negative(self):
        with pytest.raises(InvalidNumericInput):
            parse_number("-5")

    def test_zero_needs_allow_zero(self):
        with pytest.raises(InvalidNumericInput):
            parse_number("0")
        assert parse_number("0", allow_zero=True) == Decimal("0")

    def test_rejection_is_answer_rejected(self):
        with pytest.raises(AnswerRejected):
            parse_number("x")

    def test_normalize_strips_separators(self):
        assert normalize_number_text("1,234,567") == "1234567"
        assert normalize_number_text("۱۲۳۴") == "1234"


class TestParseChoice:
    """Tests for keyboard answers."""

    @pytest.mark.parametrize("text", ["🟡 Gold", "Gold", "gold", "  GOLD "])
    def test_matches_label_with_or_without_emoji(self, text):
        assert parse_choice(text, ITEM_KIND_OPTIONS) == ItemKind.GOLD

    def test_matches_coin_labels(self):
        assert parse_choice("Quarter coin", COIN_OPTIONS) == CoinType.QUARTER
        assert parse_choice("gram", COIN_OPTIONS) == CoinType.GRAM

    def test_matches_currency_codes(self):
        assert parse_choice("usd", CURRENCY_OPTIONS) == CurrencyCode.USD
        assert parse_choice("TRY", CURRENCY_OPTIONS) == CurrencyCode.TRY

    @pytest.mark.parametrize("text", ["silver", "", None, "🟡"])
    def test_rejects_other_text(self, text):
        with pytest.raises(InvalidChoice):
            parse_choice(text, ITEM_KIND_OPTIONS)


class TestParseFreeText:
    """Tests for free-text answers."""

    def test_strips(self):
        assert parse_free_text("  Ali ") == "Ali"

    def test_empty_becomes_placeholder(self):
        assert parse_free_text("   ", placeholder="-") == "-"

    def test_empty_without_placeholder(self):
        assert parse_free_text(None) == ""


class TestNumberBounds:
    """Answers outside the accepted digit budget are re-asked."""

    @pytest.mark.parametrize(
        "text",
        ["1e5000", "1234567890123456", "1,000,000,000,000,000", "-1e5000"],
    )
    def test_rejects_huge_numbers(self, text):
        with pytest.raises(InvalidNumericInput):
            parse_number(text)

    @pytest.mark.parametrize("text", ["0.0000000000000000000001", "0.0000001", "1e-7"])
    def test_rejects_excess_precision(self, text):
        with pytest.raises(InvalidNumericInput):
            parse_number(text)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("999,999,999,999,999", Decimal("999999999999999")),
            ("0.000001", Decimal("0.000001")),
            ("12.500000000", Decimal("12.5")),
            ("1e3", Decimal("1000")),
        ],
    )
    def test_accepts_within_budget(self, text, expected):
        assert parse_number(text) == expected
