"""
Abstract Storage Interface

Defines the storage operations the rest of the system relies on:
1. The Record Store: an append-only history per identity
2. The identity directory: first-contact bookkeeping
3. The audit log: append-only events

The interface is intentionally small - read, append, register.
Records are never updated or deleted.
"""

from abc import ABC, abstractmethod
from typing import Optional

from gold_ledger.models import AuditEvent, IdentityDirectoryEntry, TransactionRecord


class LedgerStorageInterface(ABC):
    """
    Abstract interface for per-identity transaction histories.
    """

    @abstractmethod
    async def read_history(self, identity: str) -> list[TransactionRecord]:
        """
        Return the ordered history of `identity`.

        An identity with no records yields an empty list, not an error.

        Raises:
            StorageError: If the stored document cannot be read
        """
        pass

    @abstractmethod
    async def append(self, identity: str, record: TransactionRecord) -> list[TransactionRecord]:
        """
        Append `record` to the history of `identity`.

        Reads the current history, appends and rewrites the whole document.
        A failed write leaves the previously stored history untouched.

        Returns:
            The history including the new record

        Raises:
            StorageError: If the read or the write fails
        """
        pass


class IdentityDirectoryInterface(ABC):
    """
    Abstract interface for the shared directory of known identities.
    """

    @abstractmethod
    async def register_once(
        self,
        identity: str,
        display_name: str,
    ) -> Optional[IdentityDirectoryEntry]:
        """
        Record `identity` the first time it is seen.

        Returns:
            The new entry, or None when the identity was already known
        """
        pass

    @abstractmethod
    async def list_entries(self) -> list[IdentityDirectoryEntry]:
        """All known identities in registration order."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 50) -> list[dict]:
        """
        Get the most recent audit events as log dicts (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDocumentError(StorageError):
    """A stored document exists but cannot be parsed."""
    pass
