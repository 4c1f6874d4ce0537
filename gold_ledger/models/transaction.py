"""
Core Data Models for Gold Ledger

These models define the strict schemas for every persisted ledger entry.
They are designed to:
1. Enforce type safety at runtime
2. Be serializable to the per-identity JSON documents without loss
3. Keep item-kind specific fields in a tagged union, so every place that
   renders or sums a record has to handle each kind explicitly

Records are immutable once built: the ledger is append-only.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


NOTE_PLACEHOLDER = "-"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Direction(str, Enum):
    """Whether the user bought or sold."""
    BUY = "buy"
    SELL = "sell"


class ItemKind(str, Enum):
    """What was traded."""
    GOLD = "gold"
    COIN = "coin"
    CURRENCY = "currency"


class CoinType(str, Enum):
    """Minted gold coin denominations."""
    FULL = "full"
    HALF = "half"
    QUARTER = "quarter"
    GRAM = "gram"


class CurrencyCode(str, Enum):
    """Foreign currencies traded over the counter."""
    USD = "usd"
    EUR = "eur"
    GBP = "gbp"
    AED = "aed"
    TRY = "try"


# =============================================================================
# ITEM DETAILS - tagged union over ItemKind
# =============================================================================

class GoldDetails(BaseModel):
    """
    Raw gold priced per mithqal.

    The weight is derived from the price of one mithqal and the
    total amount paid or received.
    """
    model_config = ConfigDict(frozen=True)

    item_kind: Literal["gold"] = "gold"
    unit_price: Decimal = Field(
        ...,
        gt=0,
        description="Price of one mithqal of gold"
    )
    total_amount: Decimal = Field(
        ...,
        ge=0,
        description="Total amount paid or received"
    )
    weight_grams: Decimal = Field(
        ...,
        ge=0,
        description="Derived gold weight in grams (3 decimals)"
    )


class _CountedDetails(BaseModel):
    """Shared fields for items sold by the piece or by the unit."""
    model_config = ConfigDict(frozen=True)

    unit_price: Decimal = Field(..., gt=0)
    quantity: Decimal = Field(..., gt=0)
    total_amount: Decimal = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_total(self):
        """The total must equal unit price times quantity."""
        if self.total_amount != self.unit_price * self.quantity:
            raise ValueError("Total amount must equal unit price times quantity")
        return self


class CoinDetails(_CountedDetails):
    """Minted coins, priced per piece."""
    item_kind: Literal["coin"] = "coin"
    coin_type: CoinType


class CurrencyDetails(_CountedDetails):
    """Foreign currency, priced per unit."""
    item_kind: Literal["currency"] = "currency"
    currency: CurrencyCode


ItemDetails = Annotated[
    Union[GoldDetails, CoinDetails, CurrencyDetails],
    Field(discriminator="item_kind"),
]


# =============================================================================
# LEDGER MODELS
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A completed transaction, as persisted in the ledger.

    Only built once a dialog reaches its final step. Never edited.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )
    direction: Direction
    details: ItemDetails
    counterparty_name: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Who the user traded with"
    )
    note: str = Field(
        default=NOTE_PLACEHOLDER,
        max_length=1000,
        description="Free text note"
    )
    recorded_at: datetime = Field(
        default_factory=datetime.now,
        description="Capture time (local clock)"
    )

    @property
    def item_kind(self) -> ItemKind:
        return ItemKind(self.details.item_kind)

    @property
    def total_amount(self) -> Decimal:
        return self.details.total_amount


class IdentityDirectoryEntry(BaseModel):
    """One known identity. Written on first contact, never mutated."""
    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., min_length=1)
    display_name: str = Field(default="User", max_length=200)
    first_seen: datetime = Field(default_factory=datetime.now)


class LedgerSummary(BaseModel):
    """Buy/sell totals folded over a history."""

    total_buy: Decimal = Decimal(0)
    total_sell: Decimal = Decimal(0)
    net_profit: Decimal = Decimal(0)
    count: int = Field(default=0, ge=0)
    buy_count: int = Field(default=0, ge=0)
    sell_count: int = Field(default=0, ge=0)
    gold_bought_grams: Decimal = Decimal(0)
    gold_sold_grams: Decimal = Decimal(0)

    @property
    def is_empty(self) -> bool:
        """True when the history had no records (distinct from totals cancelling out)."""
        return self.count == 0
