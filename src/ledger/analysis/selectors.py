#!/usr/bin/env python3
"""
Presentation Selectors

Read-only views over a ledger state for dashboards and reports: account
summaries, transaction rows, cash flow breakdown, budget usage, KPI tiles and
dangling-reference warnings.

Selectors never enforce invariants; they describe whatever state they are
given, including references to accounts or categories that no longer exist.
"""

from dataclasses import dataclass

import pandas as pd

from ..core.amounts import format_amount
from ..core.models import (
    OPENING_BALANCE_NOTE,
    UNCATEGORIZED_NAME,
    CategoryType,
    LedgerState,
    PlanningStatus,
    TransactionType,
)

CASHFLOW_COLORS = ["#f97316", "#38bdf8", "#22c55e", "#eab308", "#6366f1", "#ec4899", "#8b5cf6"]
BREAKDOWN_SIZE = 5

TRANSACTION_COLUMNS = [
    "id",
    "type",
    "amount",
    "from_account",
    "to_account",
    "category_id",
    "cycle_id",
    "date",
    "note",
]


@dataclass(frozen=True)
class CashFlow:
    inflow: float
    outflow: float
    breakdown: pd.DataFrame

    @property
    def net(self) -> float:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class Kpi:
    label: str
    value: str
    note: str


@dataclass(frozen=True)
class DanglingReference:
    """A record pointing at an account or category that does not exist."""

    record_type: str
    record_id: str
    field: str
    reference: str

    def __str__(self) -> str:
        return f"{self.record_type} {self.record_id}: {self.field} references missing {self.reference}"


def transactions_frame(state: LedgerState, cycle_id: str | None = None) -> pd.DataFrame:
    """
    Transaction log as a DataFrame.

    Args:
        state: Ledger state
        cycle_id: Keep only transactions of this cycle (default: all)
    """
    df = pd.DataFrame(
        [
            {
                "id": t.id,
                "type": t.type.value,
                "amount": t.amount,
                "from_account": t.from_account,
                "to_account": t.to_account,
                "category_id": t.category_id,
                "cycle_id": t.cycle_id,
                "date": t.date,
                "note": t.note,
            }
            for t in state.transactions
        ],
        columns=TRANSACTION_COLUMNS,
    )
    df["amount"] = df["amount"].astype(float)
    if cycle_id is not None:
        df = df[df["cycle_id"] == cycle_id]
    return df


def _sum_by_type(df: pd.DataFrame, transaction_type: TransactionType) -> float:
    return float(df.loc[df["type"] == transaction_type.value, "amount"].sum())


def build_account_summaries(state: LedgerState) -> pd.DataFrame:
    """Per-account balance with total income and expenses over the whole log."""
    df = transactions_frame(state)
    income = df[df["type"] == TransactionType.INCOME.value].groupby("to_account")["amount"].sum()
    expenses = df[df["type"] == TransactionType.EXPENSE.value].groupby("from_account")["amount"].sum()

    summary = pd.DataFrame([acc.to_dict() for acc in state.accounts], columns=["id", "name", "balance"])
    summary["balance"] = summary["balance"].astype(float)
    summary["income"] = summary["id"].map(income).fillna(0.0).astype(float)
    summary["expenses"] = summary["id"].map(expenses).fillna(0.0).astype(float)
    return summary


def build_transaction_rows(state: LedgerState, cycle_id: str | None = None) -> pd.DataFrame:
    """
    Display rows for the transaction table.

    `method` names the account(s) involved ("from → to" for transfers). Opening
    and transfer rows show a fixed category label instead of their category.
    """
    account_names = {acc.id: acc.name for acc in state.accounts}
    categories = {cat.id: cat for cat in state.categories}

    def account_name(account_id: str | None) -> str:
        if not account_id:
            return "-"
        return account_names.get(account_id, "Unknown")

    rows = []
    for t in state.transactions:
        if cycle_id is not None and t.cycle_id != cycle_id:
            continue
        category = categories.get(t.category_id)
        category_name = category.name if category else UNCATEGORIZED_NAME

        if t.type == TransactionType.TRANSFER:
            method = f"{account_name(t.from_account)} → {account_name(t.to_account)}"
            display_category = "Transfer"
        elif t.type == TransactionType.EXPENSE:
            method = account_name(t.from_account)
            display_category = category_name
        else:
            method = account_name(t.to_account)
            display_category = "Opening" if t.type == TransactionType.OPENING else category_name

        default_title = OPENING_BALANCE_NOTE if t.type == TransactionType.OPENING else category_name
        rows.append(
            {
                "id": t.id,
                "transaction": t.note or default_title,
                "amount": t.amount,
                "category": display_category,
                "category_disabled": bool(category and category.disabled),
                "category_id": t.category_id,
                "type": t.type.value,
                "method": method,
                "date": t.date,
                "cycle_id": t.cycle_id,
            }
        )

    columns = [
        "id",
        "transaction",
        "amount",
        "category",
        "category_disabled",
        "category_id",
        "type",
        "method",
        "date",
        "cycle_id",
    ]
    return pd.DataFrame(rows, columns=columns)


def build_cash_flow(state: LedgerState, cycle_id: str | None = None) -> CashFlow:
    """
    Inflow, outflow and the largest expense categories.

    Colors are assigned in order of first appearance, then the breakdown is
    ranked by value and cut to the top five.
    """
    df = transactions_frame(state, cycle_id)
    category_names = {cat.id: cat.name for cat in state.categories}

    expenses = df[df["type"] == TransactionType.EXPENSE.value].copy()
    expenses["label"] = expenses["category_id"].map(category_names).fillna(UNCATEGORIZED_NAME)
    totals = expenses.groupby("label", sort=False)["amount"].sum()

    breakdown = pd.DataFrame({"label": list(totals.index), "value": [float(v) for v in totals]})
    breakdown["color"] = [CASHFLOW_COLORS[index % len(CASHFLOW_COLORS)] for index in range(len(breakdown))]
    breakdown = breakdown.sort_values("value", ascending=False, kind="stable").head(BREAKDOWN_SIZE)

    return CashFlow(
        inflow=_sum_by_type(df, TransactionType.INCOME),
        outflow=_sum_by_type(df, TransactionType.EXPENSE),
        breakdown=breakdown.reset_index(drop=True),
    )


def spent_total(state: LedgerState, cycle_id: str) -> float:
    return _sum_by_type(transactions_frame(state, cycle_id), TransactionType.EXPENSE)


def planned_total(state: LedgerState, cycle_id: str) -> float:
    """Sum of planning costs still planned for the cycle."""
    return float(
        sum(
            cost.amount
            for cost in state.planning_costs
            if cost.cycle_id == cycle_id and cost.status == PlanningStatus.PLANNED
        )
    )


def build_budget_usage(state: LedgerState, cycle_id: str) -> pd.DataFrame:
    """
    Budget, spending and remainder per category for one cycle.

    Expense categories are always listed; other categories only when they
    carry a non-zero budget.
    """
    profile = state.budget_profile(cycle_id)
    budgets = profile.budgets if profile else {}

    df = transactions_frame(state, cycle_id)
    spent = df[df["type"] == TransactionType.EXPENSE.value].groupby("category_id")["amount"].sum()

    usage = pd.DataFrame(
        [
            {
                "category_id": cat.id,
                "name": cat.name,
                "disabled": cat.disabled,
                "budget": float(budgets.get(cat.id, 0.0)),
            }
            for cat in state.categories
            if cat.type == CategoryType.EXPENSE or budgets.get(cat.id)
        ],
        columns=["category_id", "name", "disabled", "budget"],
    )
    usage["budget"] = usage["budget"].astype(float)
    usage["spent"] = usage["category_id"].map(spent).fillna(0.0).astype(float)
    usage["remaining"] = usage["budget"] - usage["spent"]
    return usage


def build_kpis(state: LedgerState, cycle_id: str, currency: str = "THB") -> list[Kpi]:
    """KPI tiles: total balance, cycle cash flow, planned costs and budget left."""
    total_balance = sum(acc.balance for acc in state.accounts)
    cash_flow = build_cash_flow(state, cycle_id)
    planned = planned_total(state, cycle_id)
    profile = state.budget_profile(cycle_id)
    budget_total = profile.total if profile else 0.0

    def fmt(value: float) -> str:
        return format_amount(value, currency)

    return [
        Kpi("Total Balance", fmt(total_balance), f"Available after planned: {fmt(total_balance - planned)}"),
        Kpi(
            "Cash Flow (This Cycle)",
            fmt(cash_flow.net),
            f"Inflow {fmt(cash_flow.inflow)} · Outflow {fmt(cash_flow.outflow)}",
        ),
        Kpi("Planned Costs", fmt(planned), "Planned for the active cycle"),
        Kpi("Budget Left", fmt(budget_total - cash_flow.outflow), "Remaining before the cycle ends"),
    ]


def find_dangling_references(state: LedgerState) -> list[DanglingReference]:
    """Report references to accounts or categories that no longer exist."""
    account_ids = {acc.id for acc in state.accounts}
    category_ids = {cat.id for cat in state.categories}

    problems = []
    for t in state.transactions:
        for field_name, account_id in (("fromAccount", t.from_account), ("toAccount", t.to_account)):
            if account_id and account_id not in account_ids:
                problems.append(DanglingReference("transaction", t.id, field_name, account_id))
        if t.category_id and t.category_id not in category_ids:
            problems.append(DanglingReference("transaction", t.id, "categoryId", t.category_id))

    for cost in state.planning_costs:
        if cost.category_id not in category_ids:
            problems.append(DanglingReference("planning cost", cost.id, "categoryId", cost.category_id))

    for profile in state.budgets:
        for category_id in profile.budgets:
            if category_id not in category_ids:
                problems.append(DanglingReference("budget", profile.cycle_id, "categoryId", category_id))

    return problems
