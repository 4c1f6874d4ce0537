"""
Data Models Package

This package contains all Pydantic models used in Gold Ledger.
All data flowing through the system must conform to these schemas.
"""

from gold_ledger.models.transaction import (
    CoinDetails,
    CoinType,
    CurrencyCode,
    CurrencyDetails,
    Direction,
    GoldDetails,
    IdentityDirectoryEntry,
    ItemDetails,
    ItemKind,
    LedgerSummary,
    NOTE_PLACEHOLDER,
    TransactionRecord,
)
from gold_ledger.models.session import (
    OutgoingKind,
    OutgoingMessage,
    Prompt,
    Session,
    SessionStep,
)
from gold_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CoinDetails",
    "CoinType",
    "CurrencyCode",
    "CurrencyDetails",
    "Direction",
    "GoldDetails",
    "IdentityDirectoryEntry",
    "ItemDetails",
    "ItemKind",
    "LedgerSummary",
    "NOTE_PLACEHOLDER",
    "TransactionRecord",
    # Conversation models
    "OutgoingKind",
    "OutgoingMessage",
    "Prompt",
    "Session",
    "SessionStep",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
