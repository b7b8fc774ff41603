"""
Ledger Engine Package

The state engine behind the dashboard: balances are derived from a transaction
log, persisted snapshots are migrated into the current schema, and every change
goes through a single command processor.

Key Components:
- example_data: Bundled sample household used for seeding
- seed: Seed Builder producing a consistent starting ledger
- balances: Balance Engine (recompute, reverse replay, invariant check)
- normalizer: State Normalizer / Migrator run at load time
- commands: Command Processor (pure state transitions)
- references: Category reference counting for delete/disable protection
"""

from .balances import (
    LedgerContractError,
    apply_transaction,
    check_balance_invariant,
    clone_balances,
    derive_base_accounts_from_current,
    recalculate_balances,
    signed_effects,
)
from .commands import Command, CommandType, process_command, process_commands
from .example_data import EXAMPLE_DATA, ExampleData
from .normalizer import normalize_state
from .references import (
    CategoryReferences,
    can_delete_category,
    can_disable_category,
    category_reference_counts,
)
from .seed import build_seed_state, create_category_id

__all__ = [
    # Balance engine
    "LedgerContractError",
    "apply_transaction",
    "check_balance_invariant",
    "clone_balances",
    "derive_base_accounts_from_current",
    "recalculate_balances",
    "signed_effects",
    # Commands
    "Command",
    "CommandType",
    "process_command",
    "process_commands",
    # Seeding and migration
    "EXAMPLE_DATA",
    "ExampleData",
    "build_seed_state",
    "create_category_id",
    "normalize_state",
    # Category references
    "CategoryReferences",
    "can_delete_category",
    "can_disable_category",
    "category_reference_counts",
]
