#!/usr/bin/env python3
"""
Ledger DataStore

File-backed store for the persisted ledger snapshot and its backup copy.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.config import StorageConfig
from ..core.datastore_mixin import DataStoreMixin
from ..core.json_utils import read_json, write_json
from ..core.models import LedgerState

logger = logging.getLogger(__name__)


class LedgerStateStore(DataStoreMixin):
    """
    DataStore for the ledger snapshot.

    The snapshot is the JSON form of `LedgerState` written verbatim after each
    change. The store does no validation of its own; whatever it loads goes
    through the normalizer.
    """

    def __init__(
        self,
        data_dir: Path,
        state_filename: str = "ledger_state.json",
        backup_filename: str = "ledger_state.backup.json",
    ):
        """
        Initialize ledger state store.

        Args:
            data_dir: Directory holding the snapshot files
            state_filename: Name of the current snapshot file
            backup_filename: Name of the backup taken before imports
        """
        self.data_dir = Path(data_dir)
        self.state_file = self.data_dir / state_filename
        self.backup_file = self.data_dir / backup_filename

    @classmethod
    def from_config(cls, storage: StorageConfig) -> "LedgerStateStore":
        return cls(storage.state_dir, storage.state_filename, storage.backup_filename)

    def exists(self) -> bool:
        return self.state_file.exists()

    def load(self) -> Any:
        """
        Load the raw snapshot.

        Returns:
            Parsed JSON value, not yet normalized

        Raises:
            FileNotFoundError: If no snapshot has been saved
            ValueError: If the file is not valid JSON
        """
        if not self.exists():
            raise FileNotFoundError(f"Ledger snapshot not found: {self.state_file}")
        return read_json(self.state_file)

    def load_snapshot(self) -> Any | None:
        """Load the raw snapshot, returning None when it is missing or unreadable."""
        if not self.exists():
            return None
        try:
            return self.load()
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable ledger snapshot {self.state_file}: {e}")
            return None

    def save(self, data: LedgerState | dict) -> None:
        """
        Save a snapshot.

        Args:
            data: Ledger state or its serialized dict
        """
        snapshot = data.to_dict() if isinstance(data, LedgerState) else data
        write_json(self.state_file, snapshot)
        logger.debug(f"Saved ledger snapshot to {self.state_file}")

    def backup(self) -> Path | None:
        """
        Copy the current snapshot to the backup file.

        Returns:
            Path of the backup, or None when there is nothing to back up
        """
        if not self.exists():
            return None
        shutil.copy2(self.state_file, self.backup_file)
        logger.info(f"Backed up ledger snapshot to {self.backup_file}")
        return self.backup_file

    def last_modified(self) -> datetime | None:
        if not self.exists():
            return None
        return datetime.fromtimestamp(self.state_file.stat().st_mtime)

    def item_count(self) -> int | None:
        """Number of transactions in the stored snapshot."""
        snapshot = self.load_snapshot()
        if snapshot is None:
            return None
        transactions = snapshot.get("transactions") if isinstance(snapshot, dict) else None
        return len(transactions) if isinstance(transactions, list) else 0

    def size_bytes(self) -> int | None:
        """Total size of the snapshot and its backup."""
        if not self.exists():
            return None
        return sum(path.stat().st_size for path in (self.state_file, self.backup_file) if path.exists())

    def summary_text(self) -> str:
        count = self.item_count()
        if count is None:
            return "No ledger snapshot found"
        return f"Ledger snapshot: {count} transactions"
