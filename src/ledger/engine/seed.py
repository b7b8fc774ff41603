#!/usr/bin/env python3
"""
Seed Builder

Turns the bundled example data into a self-consistent starting ledger. Used when
no persisted snapshot exists or the persisted one is unusable.
"""

import re
from collections.abc import Iterable
from datetime import date
from typing import Any

from ..core.amounts import to_amount
from ..core.cycles import current_cycle_id, derive_cycle_id, parse_date
from ..core.models import (
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
    normalize_name,
)
from .balances import recalculate_balances
from .example_data import EXAMPLE_DATA, ExampleData

DEFAULT_PLANNING_CATEGORY = "subscription"


def slugify_category(name: Any) -> str:
    """Slug used for category ids: "Food and Drinks" -> "food-and-drinks"."""
    return re.sub(r"[^a-z0-9]+", "-", normalize_name(name)).strip("-")


def create_category_id(name: Any, existing_ids: Iterable[str]) -> str:
    """Build a unique "cat-<slug>" id, suffixing -2, -3, ... on collision."""
    taken = set(existing_ids)
    slug = slugify_category(name)
    base = f"cat-{slug}" if slug else "cat-category"
    candidate = base
    counter = 2
    while candidate in taken:
        candidate = f"{base}-{counter}"
        counter += 1
    return candidate


def uncategorized_category() -> Category:
    return Category(id=UNCATEGORIZED_ID, name=UNCATEGORIZED_NAME, type=CategoryType.EXPENSE)


def category_ids_by_name(categories: Iterable[Category]) -> dict[str, str]:
    """Map of normalized category name to id; the first category wins on duplicates."""
    mapping: dict[str, str] = {}
    for category in categories:
        mapping.setdefault(normalize_name(category.name), category.id)
    return mapping


def build_seed_categories(example: ExampleData) -> tuple[Category, ...]:
    categories = [uncategorized_category()]
    for record in example.categories:
        category_id = create_category_id(record["name"], (cat.id for cat in categories))
        categories.append(
            Category(
                id=category_id,
                name=record["name"],
                type=CategoryType.parse(record.get("type")) or CategoryType.EXPENSE,
            )
        )
    return tuple(categories)


def build_budget_map(categories: Iterable[Category], budget_categories: Iterable[dict[str, Any]]) -> dict[str, float]:
    """
    Budget amounts for every category, taken from example records by name.

    Categories without an example budget get 0.
    """
    categories = list(categories)
    budget_map = {category.id: 0.0 for category in categories}
    ids_by_name = category_ids_by_name(categories)
    for record in budget_categories:
        category_id = ids_by_name.get(normalize_name(record.get("name")))
        if category_id:
            budget_map[category_id] = to_amount(record.get("budget"))
    return budget_map


def build_planning_costs(
    subscriptions: Iterable[dict[str, Any]], categories: Iterable[Category], cycle_id: str
) -> tuple[PlanningCost, ...]:
    """
    Planning costs for the given cycle from subscription records.

    The billing day is the day of the subscription's next billing date. Costs
    without a matching category fall back to the Subscription category, then
    to uncategorized.
    """
    ids_by_name = category_ids_by_name(categories)
    default_category = ids_by_name.get(DEFAULT_PLANNING_CATEGORY, UNCATEGORIZED_ID)

    costs = []
    for index, record in enumerate(subscriptions, start=1):
        next_date = parse_date(record.get("nextDate"))
        costs.append(
            PlanningCost(
                id=f"plan-{index}",
                name=str(record.get("name") or f"Planning cost {index}"),
                amount=abs(to_amount(record.get("cost"))),
                category_id=ids_by_name.get(normalize_name(record.get("category")), default_category),
                billing_day=next_date.day if next_date else 1,
                cycle_id=cycle_id,
                status=PlanningStatus.PLANNED,
            )
        )
    return tuple(costs)


def build_seed_state(example: ExampleData = EXAMPLE_DATA, today: date | None = None) -> LedgerState:
    """
    Construct the starting ledger from example data.

    Args:
        example: Example records to seed from
        today: Pin the current date (default: system date)

    Returns:
        Ledger state whose balances are already recomputed
    """
    cycle_id = current_cycle_id(today)

    accounts = tuple(
        Account(id=f"acc-{index}", name=record["name"], balance=to_amount(record.get("balance")))
        for index, record in enumerate(example.accounts, start=1)
    )
    account_ids_by_name = {account.name: account.id for account in accounts}

    categories = build_seed_categories(example)
    ids_by_name = category_ids_by_name(categories)

    transactions = tuple(
        Transaction(
            id=f"txn-{record['id']}",
            type=TransactionType.EXPENSE,
            amount=abs(to_amount(record.get("amount"))),
            date=record["date"],
            cycle_id=derive_cycle_id(record["date"], today),
            from_account=account_ids_by_name.get(record.get("method")),
            category_id=ids_by_name.get(normalize_name(record.get("category")), UNCATEGORIZED_ID),
            note=record.get("transaction", ""),
        )
        for record in example.transactions
    )

    state = LedgerState(
        accounts=accounts,
        base_accounts=accounts,
        transactions=transactions,
        categories=categories,
        budgets=(BudgetProfile(cycle_id=cycle_id, budgets=build_budget_map(categories, example.budget_categories)),),
        planning_costs=build_planning_costs(example.subscriptions, categories, cycle_id),
    )
    return recalculate_balances(state)
