"""
Number, date and field formatting shared by every renderer.

Currency figures are grouped by thousands; weights always carry exactly
three fractional digits. With the `fa` locale digits and separators are
rendered in Persian.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from gold_ledger.conversation.prompts import (
    COIN_OPTIONS,
    CURRENCY_OPTIONS,
    DIRECTION_LABELS,
)
from gold_ledger.models import (
    CoinDetails,
    CurrencyDetails,
    GoldDetails,
    TransactionRecord,
)


_PERSIAN_TABLE = str.maketrans({
    **{str(i): ch for i, ch in enumerate("۰۱۲۳۴۵۶۷۸۹")},
    ",": "٬",
    ".": "٫",
})

_COIN_LABELS = {option: label for label, option in COIN_OPTIONS.items()}
_CURRENCY_LABELS = {option: label for label, option in CURRENCY_OPTIONS.items()}


class LedgerFormatter:
    """Locale-aware rendering of ledger values."""

    def __init__(
        self,
        locale: str = "en",
        currency_label: str = "Toman",
        weight_label: str = "g",
    ):
        self.locale = locale
        self.currency_label = currency_label
        self.weight_label = weight_label

    def localize(self, text: str) -> str:
        if self.locale == "fa":
            return text.translate(_PERSIAN_TABLE)
        return text

    def amount(self, value: Decimal) -> str:
        """Thousands-grouped number: 1234567 -> '1,234,567'."""
        value = Decimal(value)
        if value == value.to_integral_value():
            value = value.to_integral_value()
        return self.localize(f"{value:,f}")

    def money(self, value: Decimal) -> str:
        return f"{self.amount(value)} {self.currency_label}"

    def weight(self, value: Decimal) -> str:
        """Weight with exactly three fractional digits."""
        return f"{self.localize(f'{Decimal(value):.3f}')} {self.weight_label}"

    def timestamp(self, value: datetime) -> str:
        return self.localize(value.strftime("%Y-%m-%d %H:%M"))

    def direction(self, record: TransactionRecord) -> str:
        return DIRECTION_LABELS[record.direction]


def describe_details(record: TransactionRecord) -> str:
    """Kind-specific summary used by the flat export tables."""
    details = record.details
    if isinstance(details, GoldDetails):
        return "Gold"
    if isinstance(details, CoinDetails):
        return _COIN_LABELS[details.coin_type]
    if isinstance(details, CurrencyDetails):
        return _CURRENCY_LABELS[details.currency]
    raise TypeError(f"Unsupported record details: {type(details).__name__}")


def record_lines(
    record: TransactionRecord,
    formatter: LedgerFormatter,
) -> list[tuple[str, str]]:
    """
    (label, value) pairs covering every persisted field of a record,
    in display order. Used by the invoice and the PDF.
    """
    details = record.details
    lines = [
        ("Date", formatter.timestamp(record.recorded_at)),
        ("Transaction", formatter.direction(record)),
    ]
    if record.counterparty_name:
        lines.append(("Counterparty", record.counterparty_name))

    if isinstance(details, GoldDetails):
        lines.extend([
            ("Item", "Gold"),
            ("Price per mithqal", formatter.money(details.unit_price)),
            ("Total amount", formatter.money(details.total_amount)),
            ("Approx. weight", formatter.weight(details.weight_grams)),
        ])
    elif isinstance(details, (CoinDetails, CurrencyDetails)):
        kind = "Coin" if isinstance(details, CoinDetails) else "Currency"
        lines.extend([
            ("Item", f"{kind}: {describe_details(record)}"),
            ("Unit price", formatter.money(details.unit_price)),
            ("Quantity", formatter.amount(details.quantity)),
            ("Total amount", formatter.money(details.total_amount)),
        ])
    else:
        raise TypeError(f"Unsupported record details: {type(details).__name__}")

    lines.append(("Note", record.note))
    return lines


def export_row(
    record: TransactionRecord,
    formatter: LedgerFormatter,
) -> dict[str, str]:
    """One flat, formatted row for the CSV export."""
    details = record.details
    quantity: Optional[str] = None
    weight: Optional[str] = None

    if isinstance(details, GoldDetails):
        weight = formatter.weight(details.weight_grams)
    elif isinstance(details, (CoinDetails, CurrencyDetails)):
        quantity = formatter.amount(details.quantity)
    else:
        raise TypeError(f"Unsupported record details: {type(details).__name__}")

    return {
        "date": formatter.timestamp(record.recorded_at),
        "type": formatter.direction(record),
        "item": record.item_kind.value,
        "details": describe_details(record),
        "counterparty": record.counterparty_name or "",
        "unit_price": formatter.money(details.unit_price),
        "quantity": quantity or "",
        "total_amount": formatter.money(details.total_amount),
        "weight": weight or "",
        "note": record.note,
    }


EXPORT_COLUMNS = [
    "date",
    "type",
    "item",
    "details",
    "counterparty",
    "unit_price",
    "quantity",
    "total_amount",
    "weight",
    "note",
]
