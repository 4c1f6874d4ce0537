"""Shared fixtures: sample records and an isolated storage layout."""

from decimal import Decimal

import pytest

from gold_ledger.config import get_settings
from gold_ledger.models import (
    CoinDetails,
    CoinType,
    CurrencyCode,
    CurrencyDetails,
    Direction,
    GoldDetails,
    TransactionRecord,
)


@pytest.fixture
def gold_purchase():
    return TransactionRecord(
        direction=Direction.BUY,
        details=GoldDetails(
            unit_price=Decimal("123000"),
            total_amount=Decimal("50000"),
            weight_grams=Decimal("1.761"),
        ),
        counterparty_name="Ali",
    )


@pytest.fixture
def coin_sale():
    return TransactionRecord(
        direction=Direction.SELL,
        details=CoinDetails(
            coin_type=CoinType.FULL,
            unit_price=Decimal("45000000"),
            quantity=Decimal("2"),
            total_amount=Decimal("90000000"),
        ),
        counterparty_name="Reza",
        note="paid in cash",
    )


@pytest.fixture
def currency_purchase():
    return TransactionRecord(
        direction=Direction.BUY,
        details=CurrencyDetails(
            currency=CurrencyCode.USD,
            unit_price=Decimal("60000"),
            quantity=Decimal("100"),
            total_amount=Decimal("6000000"),
        ),
    )


@pytest.fixture
def history(gold_purchase, coin_sale, currency_purchase):
    return [gold_purchase, coin_sale, currency_purchase]


@pytest.fixture
def ledger_env(tmp_path, monkeypatch):
    """Point every storage location at a temporary directory."""
    monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LEDGER_STORAGE_EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("LEDGER_STORAGE_USERS_FILE", str(tmp_path / "users.json"))
    monkeypatch.setenv("LEDGER_STORAGE_AUDIT_FILE", str(tmp_path / "data" / "audit.jsonl"))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()
