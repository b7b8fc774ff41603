#!/usr/bin/env python3
"""Tests for the file-backed ledger snapshot store."""

import json
from pathlib import Path

import pytest

from ledger.core.config import StorageConfig
from ledger.core.datastore_mixin import StoreSummary
from ledger.storage.datastore import LedgerStateStore


class TestLedgerStateStore:
    """Test LedgerStateStore persistence and metadata."""

    def setup_method(self):
        """Set up test fixtures."""
        self.snapshot = {
            "accounts": [{"id": "a", "name": "Cash", "balance": 10}],
            "transactions": [{"id": "t1"}, {"id": "t2"}],
        }

    def test_empty_store(self, temp_dir):
        store = LedgerStateStore(temp_dir)

        assert not store.exists()
        assert store.load_snapshot() is None
        assert store.last_modified() is None
        assert store.age_days() is None
        assert store.item_count() is None
        assert store.size_bytes() is None
        assert store.summary_text() == "No ledger snapshot found"

    def test_load_missing_raises(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            LedgerStateStore(temp_dir).load()

    def test_save_and_load(self, temp_dir):
        store = LedgerStateStore(temp_dir)

        store.save(self.snapshot)

        assert store.exists()
        assert store.load() == self.snapshot
        assert json.loads(store.state_file.read_text(encoding="utf-8")) == self.snapshot

    def test_save_ledger_state(self, temp_dir, ledger_state):
        store = LedgerStateStore(temp_dir)

        store.save(ledger_state)

        assert store.load() == ledger_state.to_dict()

    def test_save_creates_missing_directory(self, temp_dir):
        store = LedgerStateStore(temp_dir / "nested" / "dir")
        store.save(self.snapshot)
        assert store.state_file.exists()

    def test_corrupt_snapshot(self, temp_dir, caplog):
        store = LedgerStateStore(temp_dir)
        store.state_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError):
            store.load()
        assert store.load_snapshot() is None
        assert "Ignoring unreadable ledger snapshot" in caplog.text

    def test_metadata(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        store.save(self.snapshot)

        assert store.item_count() == 2
        assert store.size_bytes() == store.state_file.stat().st_size
        assert store.age_days() == 0
        assert store.summary_text() == "Ledger snapshot: 2 transactions"

    def test_item_count_without_transaction_list(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        store.save({"accounts": []})
        assert store.item_count() == 0

    def test_backup(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        assert store.backup() is None

        store.save(self.snapshot)
        backup = store.backup()

        assert backup == temp_dir / "ledger_state.backup.json"
        assert json.loads(backup.read_text(encoding="utf-8")) == self.snapshot
        assert store.size_bytes() == store.state_file.stat().st_size + backup.stat().st_size

    def test_unrelated_files_are_not_counted(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        store.save(self.snapshot)
        (temp_dir / "other.json").write_text("[]", encoding="utf-8")
        (temp_dir / "ledger_state.old.json").write_text("[]", encoding="utf-8")

        assert store.size_bytes() == store.state_file.stat().st_size

    def test_size_follows_each_save(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        store.save(self.snapshot)
        first = store.size_bytes()

        store.save({**self.snapshot, "transactions": []})

        assert store.size_bytes() == store.state_file.stat().st_size
        assert store.size_bytes() < first

    def test_to_summary(self, temp_dir):
        store = LedgerStateStore(temp_dir)
        store.save(self.snapshot)

        summary = store.to_summary()

        assert isinstance(summary, StoreSummary)
        assert summary.exists
        assert summary.item_count == 2
        assert summary.to_dict()["summary"] == "Ledger snapshot: 2 transactions"
        assert isinstance(summary.to_dict()["lastUpdated"], str)

    def test_from_config(self, temp_dir):
        store = LedgerStateStore.from_config(
            StorageConfig(state_dir=temp_dir, state_filename="s.json", backup_filename="s.bak.json")
        )

        assert store.state_file == temp_dir / "s.json"
        assert store.backup_file == temp_dir / "s.bak.json"
        assert isinstance(store.data_dir, Path)
