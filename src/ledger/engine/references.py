#!/usr/bin/env python3
"""
Category Reference Counting

A category can only be deleted while nothing points at it. References come from
transactions, planning costs, and non-zero budget entries in any cycle.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any

from ..core.models import LedgerState


@dataclass(frozen=True)
class CategoryReferences:
    """How many records of each kind point at one category."""

    transactions: int = 0
    planning_costs: int = 0
    budgets: int = 0

    @property
    def total(self) -> int:
        return self.transactions + self.planning_costs + self.budgets


def category_reference_counts(state: LedgerState) -> dict[str, CategoryReferences]:
    """
    Count references per category id.

    Every known category appears in the result, as does any id that is
    referenced but no longer defined.
    """
    transactions = Counter(t.category_id for t in state.transactions if t.category_id)
    planning_costs = Counter(cost.category_id for cost in state.planning_costs if cost.category_id)
    budgets: Counter[str] = Counter()
    for profile in state.budgets:
        budgets.update(category_id for category_id, amount in profile.budgets.items() if amount)

    category_ids = [category.id for category in state.categories]
    for category_id in (*transactions, *planning_costs, *budgets):
        if category_id not in category_ids:
            category_ids.append(category_id)

    return {
        category_id: CategoryReferences(
            transactions=transactions[category_id],
            planning_costs=planning_costs[category_id],
            budgets=budgets[category_id],
        )
        for category_id in category_ids
    }


def can_disable_category(state: LedgerState, category_id: Any) -> bool:
    """Any defined category except the reserved one may be disabled."""
    category = state.find_category(category_id)
    return category is not None and not category.is_reserved


def can_delete_category(state: LedgerState, category_id: Any) -> bool:
    """Only unreferenced, non-reserved categories may be deleted."""
    if not can_disable_category(state, category_id):
        return False
    return category_reference_counts(state)[category_id].total == 0
