"""
Core Utilities Package

Shared building blocks used by the ledger engine, storage and reporting layers.

This package provides:
- Configuration management for environment-specific settings
- Amount coercion and display formatting
- Billing cycle resolution (27th-of-month cutover)
- Immutable data models for ledger snapshots
- JSON helpers with consistent formatting
"""

from .amounts import format_amount, parse_amount, to_amount, to_magnitude
from .config import (
    Config,
    Environment,
    get_config,
    get_data_dir,
    is_development,
    is_test,
    reload_config,
)
from .cycles import (
    CYCLE_CUTOVER_DAY,
    BillingCycle,
    build_cycle_options,
    current_cycle,
    current_cycle_id,
    derive_cycle_id,
    parse_date,
)
from .models import (
    OPENING_BALANCE_NOTE,
    UNCATEGORIZED_ID,
    UNCATEGORIZED_NAME,
    Account,
    BudgetProfile,
    Category,
    CategoryType,
    LedgerState,
    PlanningCost,
    PlanningStatus,
    Transaction,
    TransactionType,
    clamp_billing_day,
    coerce_id,
    generate_id,
    normalize_name,
)

__all__ = [
    # Data models
    "Account",
    "BillingCycle",
    "BudgetProfile",
    "CYCLE_CUTOVER_DAY",
    "Category",
    "CategoryType",
    # Configuration
    "Config",
    "Environment",
    "LedgerState",
    "OPENING_BALANCE_NOTE",
    "PlanningCost",
    "PlanningStatus",
    "Transaction",
    "TransactionType",
    "UNCATEGORIZED_ID",
    "UNCATEGORIZED_NAME",
    "clamp_billing_day",
    "coerce_id",
    # Cycles
    "build_cycle_options",
    "current_cycle",
    "current_cycle_id",
    "derive_cycle_id",
    # Amounts
    "format_amount",
    "generate_id",
    "get_config",
    "get_data_dir",
    "is_development",
    "is_test",
    "normalize_name",
    "parse_amount",
    "parse_date",
    "reload_config",
    "to_amount",
    "to_magnitude",
]
