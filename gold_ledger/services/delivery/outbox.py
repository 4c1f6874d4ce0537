"""
Delivery capability.

The core never talks to a chat transport directly: it hands messages,
photos and documents to a DeliveryInterface. OutboxDelivery keeps them in
memory, per identity, until the front end drains them.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Optional

from gold_ledger.models import OutgoingKind, OutgoingMessage


class DeliveryError(Exception):
    """A message could not be handed to the transport."""
    pass


class DeliveryInterface(ABC):
    """What the core needs from a transport."""

    @abstractmethod
    async def send_message(
        self,
        identity: str,
        text: str,
        keyboard: Optional[list[list[str]]] = None,
    ) -> None:
        pass

    @abstractmethod
    async def send_photo(self, identity: str, path: Path, caption: str = "") -> None:
        pass

    @abstractmethod
    async def send_document(self, identity: str, path: Path, caption: str = "") -> None:
        pass


class OutboxDelivery(DeliveryInterface):
    """In-memory outbox, one queue per identity."""

    def __init__(self):
        self._outbox: dict[str, list[OutgoingMessage]] = defaultdict(list)

    async def send_message(
        self,
        identity: str,
        text: str,
        keyboard: Optional[list[list[str]]] = None,
    ) -> None:
        self._outbox[identity].append(
            OutgoingMessage(identity=identity, text=text, keyboard=keyboard)
        )

    async def send_photo(self, identity: str, path: Path, caption: str = "") -> None:
        if not Path(path).exists():
            raise DeliveryError(f"Photo not found: {path}")
        self._outbox[identity].append(
            OutgoingMessage(
                identity=identity,
                kind=OutgoingKind.PHOTO,
                text=caption,
                path=path,
            )
        )

    async def send_document(self, identity: str, path: Path, caption: str = "") -> None:
        if not Path(path).exists():
            raise DeliveryError(f"Document not found: {path}")
        self._outbox[identity].append(
            OutgoingMessage(
                identity=identity,
                kind=OutgoingKind.DOCUMENT,
                text=caption,
                path=path,
            )
        )

    def peek(self, identity: str) -> list[OutgoingMessage]:
        return list(self._outbox.get(identity, []))

    def drain(self, identity: str) -> list[OutgoingMessage]:
        """Return and forget everything queued for `identity`."""
        return self._outbox.pop(identity, [])
