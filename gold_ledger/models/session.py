"""
Conversation Models

A Session is the ephemeral state of one in-progress dialog. It lives in the
SessionStore only while the dialog runs. Prompt and OutgoingMessage describe
what the core wants delivered; how it is delivered is up to the transport.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from gold_ledger.models.transaction import (
    CoinType,
    CurrencyCode,
    Direction,
    ItemKind,
)


class SessionStep(str, Enum):
    """Position of a dialog in the intake state machine."""
    AWAITING_NAME = "awaiting_name"
    AWAITING_ITEM_KIND = "awaiting_item_kind"
    AWAITING_UNIT_PRICE_GOLD = "awaiting_unit_price_gold"
    AWAITING_COIN_SUBTYPE = "awaiting_coin_subtype"
    AWAITING_CURRENCY_SUBTYPE = "awaiting_currency_subtype"
    AWAITING_BASE_PRICE = "awaiting_base_price"
    AWAITING_TOTAL_OR_QUANTITY = "awaiting_total_or_quantity"
    AWAITING_NOTE = "awaiting_note"
    COMPLETE = "complete"


class Session(BaseModel):
    """
    Partial record accumulated field by field.

    Each scalar is set exactly once, when its step is accepted.
    """

    identity: str
    direction: Direction
    step: SessionStep
    item_kind: Optional[ItemKind] = None
    correlation_id: UUID = Field(default_factory=uuid4)
    started_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    counterparty_name: Optional[str] = None
    coin_type: Optional[CoinType] = None
    currency: Optional[CurrencyCode] = None
    unit_price: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    weight_grams: Optional[Decimal] = None
    note: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.step == SessionStep.COMPLETE


class Prompt(BaseModel):
    """Text to show plus an optional fixed choice keyboard."""

    text: str
    keyboard: Optional[list[list[str]]] = None


class OutgoingKind(str, Enum):
    TEXT = "text"
    PHOTO = "photo"
    DOCUMENT = "document"


class OutgoingMessage(BaseModel):
    """One delivery to one identity."""

    identity: str
    kind: OutgoingKind = OutgoingKind.TEXT
    text: str = ""
    keyboard: Optional[list[list[str]]] = None
    path: Optional[Path] = None
    sent_at: datetime = Field(default_factory=datetime.now)
