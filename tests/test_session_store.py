"""Tests for the in-memory session table."""

from datetime import datetime, timedelta

import pytest

from gold_ledger.conversation import SessionStore
from gold_ledger.models import Direction, Session, SessionStep


def make_session(identity="42", **kwargs):
    return Session(
        identity=identity,
        direction=Direction.BUY,
        step=SessionStep.AWAITING_NAME,
        **kwargs,
    )


class TestSessionStore:
    """Tests for SessionStore."""

    def test_create_and_get(self):
        store = SessionStore()
        session = store.create(make_session())
        assert store.get("42") == session
        assert "42" in store
        assert len(store) == 1

    def test_one_session_per_identity(self):
        store = SessionStore()
        store.create(make_session())
        with pytest.raises(ValueError):
            store.create(make_session())

    def test_identities_are_independent(self):
        store = SessionStore()
        store.create(make_session("a"))
        store.create(make_session("b"))
        store.destroy("a")
        assert store.get("a") is None
        assert store.get("b") is not None

    def test_replace_requires_existing(self):
        store = SessionStore()
        with pytest.raises(KeyError):
            store.replace(make_session())

    def test_replace(self):
        store = SessionStore()
        session = store.create(make_session())
        moved = session.model_copy(update={"step": SessionStep.AWAITING_ITEM_KIND})
        store.replace(moved)
        assert store.get("42").step == SessionStep.AWAITING_ITEM_KIND

    def test_destroy_missing_is_noop(self):
        assert SessionStore().destroy("nobody") is None

    def test_purge_without_timeout_keeps_everything(self):
        store = SessionStore()
        store.create(make_session(updated_at=datetime.now() - timedelta(days=30)))
        assert store.purge_expired() == []
        assert len(store) == 1

    def test_purge_expired(self):
        store = SessionStore(idle_timeout=timedelta(minutes=10))
        now = datetime.now()
        store.create(make_session("old", updated_at=now - timedelta(minutes=11)))
        store.create(make_session("fresh", updated_at=now - timedelta(minutes=1)))

        expired = store.purge_expired(now=now)

        assert [session.identity for session in expired] == ["old"]
        assert "old" not in store
        assert "fresh" in store
