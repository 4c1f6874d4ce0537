"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements JSON documents on the local filesystem.
"""

from gold_ledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptDocumentError,
    IdentityDirectoryInterface,
    LedgerStorageInterface,
    StorageError,
)
from gold_ledger.services.storage.json_files import (
    JsonDocumentClient,
    JsonIdentityDirectory,
    JsonLedgerStorage,
    JsonLinesAuditStorage,
    identity_slug,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "IdentityDirectoryInterface",
    "LedgerStorageInterface",
    # Exceptions
    "CorruptDocumentError",
    "StorageError",
    # JSON file implementation
    "JsonDocumentClient",
    "JsonIdentityDirectory",
    "JsonLedgerStorage",
    "JsonLinesAuditStorage",
    "identity_slug",
]
