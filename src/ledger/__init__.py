"""
Finance Dashboard Ledger - Personal Finance State Engine

Maintains money balances derived from a transaction log, migrates older
persisted snapshots into the current schema, and partitions spending and
budgeting into billing cycles that cut over on the 27th.

Domain Packages:
- core: Configuration, amounts, billing cycles, data models
- engine: Seed builder, balance engine, normalizer, command processor
- storage: Snapshot store and export/import envelope
- analysis: Read-only selectors for dashboards and reports
- cli: Command-line interface

Example Usage:
    from ledger import LedgerSession, normalize_state, process_command

    state = normalize_state(None)
    state = process_command(state, {"type": "ADD_ACCOUNT", "payload": {"name": "Savings", "balance": 500}})

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Finance Dashboard Developers"

from .core.config import Environment, get_config
from .core.cycles import build_cycle_options, current_cycle_id, derive_cycle_id
from .core.models import LedgerState
from .engine import (
    Command,
    CommandType,
    LedgerContractError,
    build_seed_state,
    normalize_state,
    process_command,
    process_commands,
    recalculate_balances,
)
from .session import LedgerSession

__all__ = [
    # Engine
    "Command",
    "CommandType",
    "LedgerContractError",
    "LedgerSession",
    "LedgerState",
    "build_seed_state",
    "normalize_state",
    "process_command",
    "process_commands",
    "recalculate_balances",
    # Cycles
    "build_cycle_options",
    "current_cycle_id",
    "derive_cycle_id",
    # Configuration
    "Environment",
    "get_config",
]
