# Tests for issync.sync.state
# Ledger entries, serialization and persistence

import json
from pathlib import Path

import pytest

from issync.sync.category import Category
from issync.sync.fingerprint import fingerprint
from issync.sync.state import LEDGER_VERSION, Ledger, LedgerEntry, LedgerManager, LedgerStorageError


class TestLedger:
    """Tests for the in-memory ledger."""

    def test_creation(self):
        ledger = Ledger()
        assert ledger.version == LEDGER_VERSION
        assert ledger.last_sync is None
        assert ledger.entries == {}

    def test_mark_processed(self, make_item, temp_dir: Path):
        item = make_item(7, labels=["blocked"])
        path = temp_dir / "blocked" / "7-issue-7.md"

        entry = Ledger().mark_processed(item, path)

        assert entry.hash == fingerprint(item)
        assert entry.file_path == str(path)
        assert entry.category == Category.BLOCKED
        assert entry.last_processed

    def test_mark_processed_overwrites(self, make_item):
        ledger = Ledger()
        ledger.mark_processed(make_item(1), "/out/todo/1-a.md")
        ledger.mark_processed(make_item(1, state="closed"), "/out/done/1-a.md")

        entry = ledger.get_entry(1)
        assert entry.category == Category.DONE
        assert entry.file_path == "/out/done/1-a.md"
        assert len(ledger.entries) == 1

    def test_remove_entry(self, make_item):
        ledger = Ledger()
        ledger.mark_processed(make_item(1), "/out/todo/1-a.md")

        assert ledger.remove_entry(1) is True
        assert ledger.get_entry(1) is None
        assert ledger.remove_entry(1) is False

    def test_stats(self, sample_items):
        ledger = Ledger()
        for item in sample_items:
            ledger.mark_processed(item, f"/out/x/{item.number}.md")

        stats = ledger.stats()
        assert stats.total == 4
        assert stats.by_category == {"active": 1, "todo": 1, "done": 1, "blocked": 1}

    def test_serialization_format(self, make_item):
        ledger = Ledger()
        ledger.mark_processed(make_item(3, state="closed"), "/out/done/3-a.md")
        ledger.touch()

        data = ledger.to_dict()

        assert set(data) == {"lastSync", "version", "issues"}
        assert data["lastSync"] == ledger.last_sync
        assert set(data["issues"]["3"]) == {"hash", "filePath", "lastProcessed", "state"}
        assert data["issues"]["3"]["state"] == "done"

    def test_round_trip(self, make_item):
        ledger = Ledger()
        ledger.mark_processed(make_item(3), "/out/todo/3-a.md")

        restored = Ledger.from_dict(json.loads(json.dumps(ledger.to_dict())))

        assert restored.entries == ledger.entries
        assert 3 in restored.numbers

    def test_unknown_version_rejected(self):
        with pytest.raises(ValueError):
            Ledger.from_dict({"version": "9.9", "issues": {}})


class TestLedgerEntry:
    """Tests for LedgerEntry."""

    def test_from_dict_malformed(self):
        with pytest.raises((KeyError, ValueError)):
            LedgerEntry.from_dict({"hash": "x", "filePath": "/a", "state": "archived"})


class TestLedgerManager:
    """Tests for LedgerManager."""

    def test_load_missing(self, ledger_path: Path):
        manager = LedgerManager(ledger_path)
        assert manager.ledger.entries == {}

    def test_save_load(self, ledger_path: Path, make_item):
        manager = LedgerManager(ledger_path)
        manager.ledger.mark_processed(make_item(1), "/out/todo/1-a.md")
        manager.save()

        restored = LedgerManager(ledger_path).ledger
        assert restored.get_hash(1) == fingerprint(make_item(1))

    def test_corrupt_document_is_empty(self, ledger_path: Path):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text("{not json", encoding="utf-8")

        assert LedgerManager(ledger_path).ledger.entries == {}

    def test_unknown_version_is_empty(self, ledger_path: Path):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text(
            json.dumps({"version": "0.1", "issues": {"1": {"hash": "x", "filePath": "/a/todo/1.md", "state": "todo"}}}),
            encoding="utf-8",
        )

        assert LedgerManager(ledger_path).ledger.entries == {}

    def test_one_bad_entry_discards_all(self, ledger_path: Path):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text(
            json.dumps(
                {
                    "version": LEDGER_VERSION,
                    "issues": {
                        "1": {"hash": "x", "filePath": "/a/todo/1.md", "state": "todo"},
                        "2": {"filePath": "/a/todo/2.md"},
                    },
                }
            ),
            encoding="utf-8",
        )

        assert LedgerManager(ledger_path).ledger.entries == {}

    @pytest.mark.parametrize("issues", ["x", 5, ["1"], {"1": "not-an-entry"}, {"1": None}])
    def test_wrong_shaped_issues_is_empty(self, ledger_path: Path, issues):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text(json.dumps({"version": LEDGER_VERSION, "issues": issues}), encoding="utf-8")

        assert LedgerManager(ledger_path).ledger.entries == {}

    def test_unreadable_location_raises(self, ledger_path: Path):
        ledger_path.mkdir(parents=True)

        with pytest.raises(LedgerStorageError):
            LedgerManager(ledger_path).load()

    def test_unwritable_location_raises(self, ledger_path: Path):
        ledger_path.mkdir(parents=True)
        (ledger_path / "occupied").write_text("x", encoding="utf-8")
        manager = LedgerManager(ledger_path)
        manager._ledger = Ledger()

        with pytest.raises(LedgerStorageError):
            manager.save()

    def test_unsaved_changes_not_persisted(self, ledger_path: Path, make_item):
        manager = LedgerManager(ledger_path)
        manager.ledger.mark_processed(make_item(1), "/out/todo/1-a.md")
        manager.save()

        manager.ledger.mark_processed(make_item(2), "/out/todo/2-a.md")

        assert LedgerManager(ledger_path).ledger.numbers == {1}
        assert manager.reload().numbers == {1}

    def test_reset(self, ledger_path: Path, make_item):
        manager = LedgerManager(ledger_path)
        manager.ledger.mark_processed(make_item(1), "/out/todo/1-a.md")
        manager.save()

        manager.reset()

        assert LedgerManager(ledger_path).ledger.entries == {}
