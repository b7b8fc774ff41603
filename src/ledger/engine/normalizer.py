#!/usr/bin/env python3
"""
State Normalizer and Migrator

Accepts whatever was persisted (nothing, a malformed value, or a snapshot from
an older schema) and returns a schema-complete, internally consistent ledger.

Pipeline:
1. Fall back to the seed state when there is no usable account list
2. Merge persisted categories over the seed categories
3. Repair transactions (ids, amounts, categories, cycles)
4. Rebuild base accounts, deriving them from current balances if absent
5. Move implicit starting money into explicit opening transactions
6. Ensure a budget profile for the current cycle
7. Repair planning costs
8. Recompute balances

Running the pipeline on its own output changes nothing.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Any

from ..core.amounts import to_amount, to_magnitude
from ..core.cycles import BillingCycle, current_cycle, derive_cycle_id
from ..core.models import (
    OPENING_BALANCE_NOTE,
    UNCATEGORIZED_ID,
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
from .balances import derive_base_accounts_from_current, recalculate_balances
from .example_data import EXAMPLE_DATA, ExampleData
from .seed import (
    build_budget_map,
    build_planning_costs,
    build_seed_categories,
    build_seed_state,
    category_ids_by_name,
    uncategorized_category,
)

logger = logging.getLogger(__name__)


def _valid_cycle_id(value: Any) -> str | None:
    cycle = BillingCycle.from_id(value)
    return cycle.to_id() if cycle else None


def normalize_accounts(raw_accounts: list[Any]) -> tuple[Account, ...]:
    """Coerce account records, dropping entries without an id and duplicate ids."""
    accounts = []
    seen = set()
    for entry in raw_accounts:
        if not isinstance(entry, dict):
            continue
        account_id = coerce_id(entry.get("id"))
        if account_id is None or account_id in seen:
            logger.warning(f"Dropping account record without a unique id: {entry!r}")
            continue
        seen.add(account_id)
        name = str(entry.get("name") or "").strip() or "Account"
        accounts.append(Account(id=account_id, name=name, balance=to_amount(entry.get("balance"))))
    return tuple(accounts)


def _coerce_category(entry: dict[str, Any], category_id: str) -> Category:
    name = str(entry.get("name") or "").strip() or category_id
    disabled = bool(entry.get("disabled")) or entry.get("active") is False
    category = Category(
        id=category_id,
        name=name,
        type=CategoryType.parse(entry.get("type")) or CategoryType.EXPENSE,
        disabled=disabled,
    )
    if category.is_reserved and category.disabled:
        # The reserved category can never be disabled
        category = replace(category, disabled=False)
    return category


def merge_categories(seed_categories: tuple[Category, ...], raw_categories: Any) -> tuple[Category, ...]:
    """
    Merge persisted categories over seed categories by id.

    Persisted entries win on conflict; new ones are appended in their persisted
    order. The reserved uncategorized category is always present.
    """
    merged = list(seed_categories)
    index_by_id = {category.id: index for index, category in enumerate(merged)}

    for entry in raw_categories if isinstance(raw_categories, list) else []:
        if not isinstance(entry, dict):
            continue
        category_id = coerce_id(entry.get("id"))
        if category_id is None:
            continue
        category = _coerce_category(entry, category_id)
        if category_id in index_by_id:
            merged[index_by_id[category_id]] = category
        else:
            index_by_id[category_id] = len(merged)
            merged.append(category)

    if UNCATEGORIZED_ID not in index_by_id:
        merged.append(uncategorized_category())

    return tuple(merged)


def normalize_transactions(
    raw_transactions: Any, categories: tuple[Category, ...], today: date | None = None
) -> tuple[Transaction, ...]:
    """
    Repair transaction records.

    - Missing or duplicate ids are regenerated
    - Amounts become non-negative floats
    - Missing categoryId is resolved from a legacy free-text `category` field
      (case-insensitive), defaulting to uncategorized; openings carry none
    - Missing cycleId is derived from the date
    """
    ids_by_name = category_ids_by_name(categories)
    fallback_date = (today or date.today()).isoformat()

    transactions = []
    seen_ids = set()
    for entry in raw_transactions if isinstance(raw_transactions, list) else []:
        if not isinstance(entry, dict):
            logger.warning(f"Dropping malformed transaction record: {entry!r}")
            continue

        transaction_id = coerce_id(entry.get("id"))
        if transaction_id is None or transaction_id in seen_ids:
            transaction_id = generate_id("txn")
        seen_ids.add(transaction_id)

        transaction_type = TransactionType.parse(entry.get("type"))
        if transaction_type is None:
            logger.warning(f"Transaction {transaction_id} has unknown type {entry.get('type')!r}; treating as expense")
            transaction_type = TransactionType.EXPENSE

        raw_date = entry.get("date")
        transaction_date = raw_date.strip() if isinstance(raw_date, str) and raw_date.strip() else fallback_date

        if transaction_type == TransactionType.OPENING:
            category_id = None
        else:
            category_id = (
                coerce_id(entry.get("categoryId"))
                or ids_by_name.get(normalize_name(entry.get("category")))
                or UNCATEGORIZED_ID
            )

        transactions.append(
            Transaction(
                id=transaction_id,
                type=transaction_type,
                amount=to_magnitude(entry.get("amount")),
                date=transaction_date,
                cycle_id=_valid_cycle_id(entry.get("cycleId")) or derive_cycle_id(transaction_date, today),
                from_account=coerce_id(entry.get("fromAccount")),
                to_account=coerce_id(entry.get("toAccount")),
                category_id=category_id,
                note=str(entry.get("note") or ""),
                planning_cost_id=coerce_id(entry.get("planningCostId")),
            )
        )
    return tuple(transactions)


def rebuild_base_accounts(
    accounts: tuple[Account, ...], raw_base_accounts: Any, transactions: tuple[Transaction, ...]
) -> tuple[Account, ...]:
    """
    Produce one base account per account, in account order.

    Persisted base balances are kept where present. When the snapshot has no
    base ledger, or lacks an entry for some account, the base balance is
    reconstructed by reversing the transaction log against the current balance.
    """
    persisted: dict[str, float] = {}
    if isinstance(raw_base_accounts, list):
        for entry in raw_base_accounts:
            account_id = coerce_id(entry.get("id")) if isinstance(entry, dict) else None
            if account_id is not None:
                persisted.setdefault(account_id, to_amount(entry.get("balance")))

    derived = {acc.id: acc for acc in derive_base_accounts_from_current(accounts, transactions)}

    base_accounts = []
    for account in accounts:
        if account.id in persisted:
            base_accounts.append(replace(account, balance=persisted[account.id]))
        else:
            if isinstance(raw_base_accounts, list):
                logger.warning(f"Base balance missing for {account.id}; deriving from current balance")
            base_accounts.append(derived[account.id])
    return tuple(base_accounts)


def migrate_opening_balances(
    base_accounts: tuple[Account, ...], transactions: tuple[Transaction, ...], cycle: BillingCycle
) -> tuple[tuple[Account, ...], tuple[Transaction, ...]]:
    """
    Convert money sitting on the base ledger into explicit opening transactions.

    Every base account with a positive balance and no opening transaction for
    `cycle` gets one, dated the 1st of the cycle's label month, and its base
    balance drops to zero. Negative base balances stay where they are because
    an opening amount cannot be negative.
    """
    cycle_id = cycle.to_id()
    recorded = {
        (transaction.to_account, transaction.cycle_id)
        for transaction in transactions
        if transaction.type == TransactionType.OPENING
    }

    migrated_base = []
    migrated_transactions = list(transactions)
    for account in base_accounts:
        if account.balance > 0 and (account.id, cycle_id) not in recorded:
            migrated_transactions.append(
                Transaction(
                    id=generate_id("txn"),
                    type=TransactionType.OPENING,
                    amount=account.balance,
                    date=cycle.first_of_month(),
                    cycle_id=cycle_id,
                    to_account=account.id,
                    note=OPENING_BALANCE_NOTE,
                )
            )
            migrated_base.append(replace(account, balance=0.0))
        else:
            if account.balance < 0:
                logger.debug(f"Keeping negative base balance for {account.id} on the base ledger")
            migrated_base.append(account)

    created = len(migrated_transactions) - len(transactions)
    if created:
        logger.info(f"Migrated {created} base balance(s) into opening transactions for {cycle_id}")

    return tuple(migrated_base), tuple(migrated_transactions)


def ensure_budgets(
    raw_budgets: Any, categories: tuple[Category, ...], example: ExampleData, cycle_id: str
) -> tuple[BudgetProfile, ...]:
    """
    Keep valid budget profiles and guarantee one for `cycle_id`.

    The new profile is seeded from the example budgets only when no profile
    exists at all; otherwise it starts empty.
    """
    profiles: list[BudgetProfile] = []
    seen = set()
    for entry in raw_budgets if isinstance(raw_budgets, list) else []:
        if not isinstance(entry, dict):
            continue
        profile_cycle = _valid_cycle_id(entry.get("cycleId"))
        if profile_cycle is None or profile_cycle in seen:
            continue
        seen.add(profile_cycle)
        amounts = entry.get("budgets")
        budgets = {str(key): to_amount(value) for key, value in amounts.items()} if isinstance(amounts, dict) else {}
        profiles.append(BudgetProfile(cycle_id=profile_cycle, budgets=budgets))

    if cycle_id not in seen:
        seed = build_budget_map(categories, example.budget_categories) if not profiles else {}
        profiles.append(BudgetProfile(cycle_id=cycle_id, budgets=seed))

    return tuple(profiles)


def ensure_planning_costs(
    raw_costs: Any, categories: tuple[Category, ...], example: ExampleData, cycle_id: str
) -> tuple[PlanningCost, ...]:
    """Coerce planning costs; a snapshot without any list gets the example subscriptions."""
    if not isinstance(raw_costs, list):
        return build_planning_costs(example.subscriptions, categories, cycle_id)

    costs = []
    seen_ids = set()
    for entry in raw_costs:
        if not isinstance(entry, dict):
            continue
        cost_id = coerce_id(entry.get("id"))
        if cost_id is None or cost_id in seen_ids:
            cost_id = generate_id("plan")
        seen_ids.add(cost_id)
        costs.append(
            PlanningCost(
                id=cost_id,
                name=str(entry.get("name") or "").strip() or "Planning cost",
                amount=to_magnitude(entry.get("amount")),
                category_id=coerce_id(entry.get("categoryId")) or UNCATEGORIZED_ID,
                billing_day=clamp_billing_day(to_amount(entry.get("billingDay"))),
                cycle_id=_valid_cycle_id(entry.get("cycleId")) or cycle_id,
                status=PlanningStatus.parse(entry.get("status")) or PlanningStatus.PLANNED,
            )
        )
    return tuple(costs)


def normalize_state(
    persisted: Any, *, example: ExampleData = EXAMPLE_DATA, today: date | None = None
) -> LedgerState:
    """
    Turn a persisted snapshot into a valid ledger state.

    Args:
        persisted: Snapshot dict, LedgerState, None, or any malformed value
        example: Example data used for fallbacks and defaults
        today: Pin the current date (default: system date)

    Returns:
        Normalized ledger state with recomputed balances
    """
    if isinstance(persisted, LedgerState):
        persisted = persisted.to_dict()

    if not isinstance(persisted, dict) or not isinstance(persisted.get("accounts"), list):
        logger.info("No usable persisted state found; starting from example data")
        persisted = build_seed_state(example, today).to_dict()

    cycle = current_cycle(today)

    categories = merge_categories(build_seed_categories(example), persisted.get("categories"))
    transactions = normalize_transactions(persisted.get("transactions"), categories, today)
    accounts = normalize_accounts(persisted["accounts"])
    base_accounts = rebuild_base_accounts(accounts, persisted.get("baseAccounts"), transactions)
    base_accounts, transactions = migrate_opening_balances(base_accounts, transactions, cycle)

    state = LedgerState(
        accounts=base_accounts,
        base_accounts=base_accounts,
        transactions=transactions,
        categories=categories,
        budgets=ensure_budgets(persisted.get("budgets"), categories, example, cycle.to_id()),
        planning_costs=ensure_planning_costs(persisted.get("planningCosts"), categories, example, cycle.to_id()),
    )
    return recalculate_balances(state)
