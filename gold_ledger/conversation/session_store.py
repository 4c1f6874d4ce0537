"""
Session Store

Owns the mapping identity -> Session. A session exists from the start of a
dialog until it completes or is abandoned; at most one exists per identity.
"""

from datetime import datetime, timedelta
from typing import Optional

from gold_ledger.models import Session


class SessionStore:
    """In-memory table of active dialogs."""

    def __init__(self, idle_timeout: Optional[timedelta] = None):
        self._sessions: dict[str, Session] = {}
        self._idle_timeout = idle_timeout

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, identity: str) -> bool:
        return identity in self._sessions

    def get(self, identity: str) -> Optional[Session]:
        return self._sessions.get(identity)

    def create(self, session: Session) -> Session:
        """
        Register a new dialog.

        Raises:
            ValueError: the identity already has an active dialog
        """
        if session.identity in self._sessions:
            raise ValueError(f"Identity {session.identity} already has an active dialog")
        self._sessions[session.identity] = session
        return session

    def replace(self, session: Session) -> Session:
        """Store the next state of an existing dialog."""
        if session.identity not in self._sessions:
            raise KeyError(session.identity)
        self._sessions[session.identity] = session
        return session

    def destroy(self, identity: str) -> Optional[Session]:
        """Remove and return the dialog, if any."""
        return self._sessions.pop(identity, None)

    def purge_expired(self, now: Optional[datetime] = None) -> list[Session]:
        """Drop sessions idle for longer than the configured timeout."""
        if self._idle_timeout is None:
            return []
        now = now or datetime.now()
        expired = [
            session for session in self._sessions.values()
            if now - session.updated_at > self._idle_timeout
        ]
        for session in expired:
            del self._sessions[session.identity]
        return expired
