"""Tests for the JSON document storage backends."""

import json

import pytest

from gold_ledger.models import AuditEventBuilder
from gold_ledger.services.storage import (
    CorruptDocumentError,
    JsonIdentityDirectory,
    JsonLedgerStorage,
    JsonLinesAuditStorage,
    StorageError,
    identity_slug,
)


class TestLedgerStorage:
    """Tests for JsonLedgerStorage."""

    @pytest.mark.asyncio
    async def test_missing_document_is_empty_history(self, tmp_path):
        storage = JsonLedgerStorage(tmp_path)
        assert await storage.read_history("42") == []

    @pytest.mark.asyncio
    async def test_round_trip_every_kind(self, tmp_path, history):
        storage = JsonLedgerStorage(tmp_path)
        for record in history:
            await storage.append("42", record)

        assert await storage.read_history("42") == history

    @pytest.mark.asyncio
    async def test_document_name(self, tmp_path, gold_purchase):
        storage = JsonLedgerStorage(tmp_path)
        await storage.append("42", gold_purchase)
        assert (tmp_path / "data_42.json").exists()

        document = json.loads((tmp_path / "data_42.json").read_text(encoding="utf-8"))
        assert document[0]["details"]["item_kind"] == "gold"
        assert document[0]["details"]["weight_grams"] == "1.761"

    @pytest.mark.asyncio
    async def test_append_returns_full_history(self, tmp_path, gold_purchase, coin_sale):
        storage = JsonLedgerStorage(tmp_path)
        await storage.append("42", gold_purchase)
        history = await storage.append("42", coin_sale)
        assert [record.id for record in history] == [gold_purchase.id, coin_sale.id]

    @pytest.mark.asyncio
    async def test_identities_are_isolated(self, tmp_path, gold_purchase, coin_sale):
        storage = JsonLedgerStorage(tmp_path)
        await storage.append("a", gold_purchase)
        await storage.append("b", coin_sale)
        assert await storage.read_history("a") == [gold_purchase]
        assert await storage.read_history("b") == [coin_sale]

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_document(
        self, tmp_path, monkeypatch, gold_purchase, coin_sale
    ):
        storage = JsonLedgerStorage(tmp_path)
        await storage.append("42", gold_purchase)
        before = storage.path_for("42").read_bytes()

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("gold_ledger.services.storage.json_files.os.replace", broken_replace)

        with pytest.raises(StorageError):
            await storage.append("42", coin_sale)

        monkeypatch.undo()
        assert storage.path_for("42").read_bytes() == before
        assert await storage.read_history("42") == [gold_purchase]
        assert list(tmp_path.glob("*.tmp")) == []

    @pytest.mark.asyncio
    async def test_corrupt_document(self, tmp_path):
        storage = JsonLedgerStorage(tmp_path)
        storage.path_for("42").write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptDocumentError):
            await storage.read_history("42")

    @pytest.mark.asyncio
    async def test_malformed_records(self, tmp_path):
        storage = JsonLedgerStorage(tmp_path)
        storage.path_for("42").write_text('[{"direction": "buy"}]', encoding="utf-8")
        with pytest.raises(StorageError):
            await storage.read_history("42")

    def test_identity_slug(self):
        assert identity_slug("507528648") == "507528648"
        assert identity_slug("../etc/passwd") == ".._2fetc_2fpasswd"
        assert identity_slug("user 7") == "user_207"
        assert identity_slug("") == "_"

    @pytest.mark.parametrize(
        "first,second",
        [("a/b", "a_b"), ("a b", "a_20b"), ("_", ""), ("علی", "ali")],
    )
    def test_identity_slug_keeps_identities_apart(self, first, second):
        assert identity_slug(first) != identity_slug(second)

    @pytest.mark.asyncio
    async def test_lookalike_identities_keep_separate_documents(
        self, tmp_path, gold_purchase, coin_sale
    ):
        storage = JsonLedgerStorage(tmp_path)
        await storage.append("a/b", gold_purchase)
        await storage.append("a_b", coin_sale)

        assert storage.path_for("a/b") != storage.path_for("a_b")
        assert await storage.read_history("a/b") == [gold_purchase]
        assert await storage.read_history("a_b") == [coin_sale]


class TestIdentityDirectory:
    """Tests for JsonIdentityDirectory."""

    @pytest.mark.asyncio
    async def test_register_once(self, tmp_path):
        directory = JsonIdentityDirectory(tmp_path / "users.json")

        first = await directory.register_once("42", "Ali")
        second = await directory.register_once("42", "Someone else")

        assert first is not None
        assert first.display_name == "Ali"
        assert second is None
        entries = await directory.list_entries()
        assert [entry.identity for entry in entries] == ["42"]
        assert entries[0].display_name == "Ali"

    @pytest.mark.asyncio
    async def test_keeps_first_seen_order(self, tmp_path):
        directory = JsonIdentityDirectory(tmp_path / "users.json")
        for identity in ("3", "1", "2"):
            await directory.register_once(identity, "User")
        entries = await directory.list_entries()
        assert [entry.identity for entry in entries] == ["3", "1", "2"]


class TestAuditStorage:
    """Tests for JsonLinesAuditStorage."""

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        for count in range(5):
            await storage.append_event(AuditEventBuilder.summary_presented("42", count))

        events = await storage.get_recent_events(limit=3)

        assert len(events) == 3
        assert [event["details"]["count"] for event in events] == [4, 3, 2]

    @pytest.mark.asyncio
    async def test_skips_torn_lines(self, tmp_path):
        path = tmp_path / "audit.jsonl"
        storage = JsonLinesAuditStorage(path)
        await storage.append_event(AuditEventBuilder.summary_presented("42", 1))
        with path.open("a", encoding="utf-8") as handle:
            handle.write('{"event_type": \n')

        events = await storage.get_recent_events()
        assert len(events) == 1

    @pytest.mark.asyncio
    async def test_no_log_yet(self, tmp_path):
        storage = JsonLinesAuditStorage(tmp_path / "audit.jsonl")
        assert await storage.get_recent_events() == []
