"""
Ledger Analysis Package

Read-only selectors turning a ledger state into the views a dashboard shows.
Built on pandas; none of these functions modify state or enforce invariants.

Key Components:
- selectors: account summaries, transaction rows, cash flow, budget usage,
  KPI tiles, dangling-reference warnings
"""

from .selectors import (
    CashFlow,
    DanglingReference,
    Kpi,
    build_account_summaries,
    build_budget_usage,
    build_cash_flow,
    build_kpis,
    build_transaction_rows,
    find_dangling_references,
    planned_total,
    spent_total,
    transactions_frame,
)

__all__ = [
    "CashFlow",
    "DanglingReference",
    "Kpi",
    "build_account_summaries",
    "build_budget_usage",
    "build_cash_flow",
    "build_kpis",
    "build_transaction_rows",
    "find_dangling_references",
    "planned_total",
    "spent_total",
    "transactions_frame",
]
