"""
JSON File Storage Implementation

Each identity's history is one JSON document (`data_<identity>.json`) in the
data directory; the identity directory is a single shared JSON document;
the audit log is a JSON-lines file.

Documents are rewritten whole: the new content goes to a temporary file in
the same directory, which then replaces the old document with os.replace.
A failed write therefore never leaves a half-written document behind.
Transient OS errors are retried before surfacing as StorageError.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gold_ledger.config import get_settings
from gold_ledger.models import AuditEvent, IdentityDirectoryEntry, TransactionRecord
from gold_ledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptDocumentError,
    IdentityDirectoryInterface,
    LedgerStorageInterface,
    StorageError,
)


_HISTORY_ADAPTER = TypeAdapter(list[TransactionRecord])
_DIRECTORY_ADAPTER = TypeAdapter(list[IdentityDirectoryEntry])
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def _escape(match: re.Match) -> str:
    return "".join(f"_{byte:02x}" for byte in match.group().encode("utf-8"))


def identity_slug(identity: str) -> str:
    """
    Filesystem-safe, deterministic and reversible form of an identity.

    Every byte outside [A-Za-z0-9.-] (including "_") becomes "_xx", so two
    different identities never share a slug: "a/b" -> "a_2fb", "a_b" -> "a_5fb".
    """
    return _UNSAFE_FILENAME_CHARS.sub(_escape, str(identity)) or "_"


class JsonDocumentClient:
    """
    Low-level JSON document reader/writer.

    Provides retry logic and atomic replacement for whole-document writes.
    """

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def read(self, path: Path, default: Any = None) -> Any:
        """Parse the document at `path`, or return `default` if it does not exist."""
        if not path.exists():
            return default
        with path.open("r", encoding="utf-8") as handle:
            try:
                return json.load(handle)
            except json.JSONDecodeError as e:
                raise CorruptDocumentError(f"Document {path} is not valid JSON: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def write(self, path: Path, data: Any) -> None:
        """Replace the document at `path` with `data`."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def append_line(self, path: Path, line: str) -> None:
        """Append one line to a text file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line.rstrip("\n") + "\n")


class JsonLedgerStorage(LedgerStorageInterface):
    """
    One JSON document per identity holding its ordered history.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        client: Optional[JsonDocumentClient] = None,
    ):
        self._data_dir = Path(data_dir or get_settings().storage.data_dir)
        self._client = client or JsonDocumentClient()

    def path_for(self, identity: str) -> Path:
        return self._data_dir / f"data_{identity_slug(identity)}.json"

    async def read_history(self, identity: str) -> list[TransactionRecord]:
        """Read the history of an identity (empty if none)."""
        path = self.path_for(identity)
        try:
            raw = self._client.read(path, default=[])
        except StorageError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to read history for {identity}: {e}")

        try:
            return _HISTORY_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise CorruptDocumentError(f"History for {identity} is malformed: {e}")

    async def append(self, identity: str, record: TransactionRecord) -> list[TransactionRecord]:
        """Append one record and rewrite the history document."""
        history = await self.read_history(identity)
        history.append(record)

        try:
            self._client.write(
                self.path_for(identity),
                [item.model_dump(mode="json") for item in history],
            )
        except OSError as e:
            raise StorageError(f"Failed to save transaction for {identity}: {e}")
        return history


class JsonIdentityDirectory(IdentityDirectoryInterface):
    """
    Shared list of known identities (users.json).
    """

    def __init__(
        self,
        users_file: Optional[Path] = None,
        client: Optional[JsonDocumentClient] = None,
    ):
        self._users_file = Path(users_file or get_settings().storage.users_file)
        self._client = client or JsonDocumentClient()

    async def list_entries(self) -> list[IdentityDirectoryEntry]:
        try:
            raw = self._client.read(self._users_file, default=[])
        except StorageError:
            raise
        except OSError as e:
            raise StorageError(f"Failed to read identity directory: {e}")

        try:
            return _DIRECTORY_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise CorruptDocumentError(f"Identity directory is malformed: {e}")

    async def register_once(
        self,
        identity: str,
        display_name: str,
    ) -> Optional[IdentityDirectoryEntry]:
        """Add the identity unless it is already listed."""
        entries = await self.list_entries()
        if any(entry.identity == identity for entry in entries):
            return None

        entry = IdentityDirectoryEntry(identity=identity, display_name=display_name)
        entries.append(entry)
        try:
            self._client.write(
                self._users_file,
                [item.model_dump(mode="json") for item in entries],
            )
        except OSError as e:
            raise StorageError(f"Failed to register identity {identity}: {e}")
        return entry


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.
    """

    def __init__(
        self,
        audit_file: Optional[Path] = None,
        client: Optional[JsonDocumentClient] = None,
    ):
        self._audit_file = Path(audit_file or get_settings().storage.audit_file)
        self._client = client or JsonDocumentClient()

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._client.append_line(self._audit_file, event.to_json_line())
            return True
        except OSError as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_recent_events(self, limit: int = 50) -> list[dict]:
        if not self._audit_file.exists():
            return []
        try:
            lines = self._audit_file.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(lines):
            if not line.strip():
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue  # Skip torn lines
            if len(events) >= limit:
                break
        return events
