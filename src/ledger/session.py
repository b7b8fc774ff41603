#!/usr/bin/env python3
"""
Ledger Session

Owns the current ledger state for one process. Bootstraps from the snapshot
store, serializes command dispatch behind a lock, and persists every snapshot
that a command changed.
"""

import logging
import threading
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from .core.models import LedgerState
from .engine.balances import check_balance_invariant
from .engine.commands import Command, process_command
from .engine.example_data import EXAMPLE_DATA, ExampleData
from .engine.normalizer import normalize_state
from .storage.datastore import LedgerStateStore
from .storage.envelope import build_envelope, parse_envelope

logger = logging.getLogger(__name__)


class LedgerSession:
    """
    Single writer for a ledger.

    Commands are applied one at a time in submission order. Each returned
    snapshot is immutable and safe to hand to readers.
    """

    def __init__(
        self,
        store: LedgerStateStore | None = None,
        *,
        example: ExampleData = EXAMPLE_DATA,
        today: date | None = None,
    ):
        """
        Load and normalize the persisted ledger.

        Args:
            store: Snapshot store; None keeps the ledger in memory only
            example: Example data used when nothing usable is persisted
            today: Pin the current date (default: system date)
        """
        self.store = store
        self._example = example
        self._today = today
        self._lock = threading.Lock()

        snapshot = store.load_snapshot() if store is not None else None
        self._state = normalize_state(snapshot, example=example, today=today)
        self._check_invariant()

        if store is not None and self._state.to_dict() != snapshot:
            store.save(self._state)

    @property
    def state(self) -> LedgerState:
        return self._state

    def _check_invariant(self) -> None:
        for problem in check_balance_invariant(self._state):
            logger.error(f"Balance invariant violated: {problem}")

    def dispatch(
        self, command: str | Command | Mapping[str, Any], payload: Mapping[str, Any] | None = None
    ) -> LedgerState:
        """
        Apply one command and persist the result if it changed anything.

        Args:
            command: Command type name, a Command, or a `{type, payload}` mapping
            payload: Payload when `command` is a type name

        Returns:
            The current state after the command
        """
        if isinstance(command, str):
            command = Command(type=command, payload=payload or {})

        with self._lock:
            new_state = process_command(self._state, command, today=self._today)
            changed = new_state is not self._state
            self._state = new_state
            self._check_invariant()
            if changed and self.store is not None:
                self.store.save(new_state)
            return new_state

    def export_envelope(self, now: datetime | None = None) -> dict[str, Any]:
        """Current state wrapped in an export envelope."""
        return build_envelope(self._state, now)

    def import_envelope(self, data: Any) -> LedgerState:
        """
        Replace the ledger with the state from an export envelope.

        The current snapshot is backed up first. The imported state goes
        through the normalizer before it becomes current.

        Raises:
            InvalidEnvelopeError: If the envelope is rejected
        """
        imported = parse_envelope(data)

        with self._lock:
            if self.store is not None:
                self.store.backup()
            self._state = normalize_state(imported, example=self._example, today=self._today)
            self._check_invariant()
            if self.store is not None:
                self.store.save(self._state)
            logger.info(f"Imported ledger with {len(self._state.transactions)} transactions")
            return self._state
