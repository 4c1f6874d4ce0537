"""
Summary Aggregator

Deterministic fold over a history. The summary of an empty history is all
zeros with count 0; callers that present summaries must report "no data"
instead (see `require_history`).
"""

from decimal import Decimal
from typing import Sequence

from gold_ledger.models import (
    CoinDetails,
    CurrencyDetails,
    Direction,
    GoldDetails,
    LedgerSummary,
    TransactionRecord,
)


class NoDataError(Exception):
    """A summary or export was requested for an empty history."""
    pass


def require_history(history: Sequence[TransactionRecord]) -> Sequence[TransactionRecord]:
    """
    Raises:
        NoDataError: the history is empty
    """
    if not history:
        raise NoDataError("No transactions recorded yet")
    return history


def summarize(history: Sequence[TransactionRecord]) -> LedgerSummary:
    """Buy/sell totals, net profit and counts over `history`."""
    total_buy = Decimal(0)
    total_sell = Decimal(0)
    buy_count = 0
    sell_count = 0
    gold_bought = Decimal(0)
    gold_sold = Decimal(0)

    for record in history:
        details = record.details
        if isinstance(details, GoldDetails):
            weight = details.weight_grams
        elif isinstance(details, (CoinDetails, CurrencyDetails)):
            weight = Decimal(0)
        else:
            raise TypeError(f"Unsupported record details: {type(details).__name__}")

        if record.direction == Direction.BUY:
            total_buy += details.total_amount
            buy_count += 1
            gold_bought += weight
        else:
            total_sell += details.total_amount
            sell_count += 1
            gold_sold += weight

    return LedgerSummary(
        total_buy=total_buy,
        total_sell=total_sell,
        net_profit=total_sell - total_buy,
        count=len(history),
        buy_count=buy_count,
        sell_count=sell_count,
        gold_bought_grams=gold_bought,
        gold_sold_grams=gold_sold,
    )
