#!/usr/bin/env python3
"""
Core Data Models for the Finance Dashboard Ledger

Immutable records making up a ledger snapshot. Every model serializes to the
JSON shape the dashboard persists (camelCase keys), so `LedgerState.to_dict()`
can be stored or exported verbatim.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNCATEGORIZED_ID = "cat-uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"
OPENING_BALANCE_NOTE = "Opening Balance"


class TransactionType(Enum):
    """Types of ledger transactions."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    OPENING = "opening"  # Synthetic starting balance

    @classmethod
    def parse(cls, value: Any) -> "TransactionType | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class CategoryType(Enum):
    """Whether a category classifies money coming in or going out."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: Any) -> "CategoryType | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class PlanningStatus(Enum):
    """Lifecycle of a planning cost within its cycle."""

    PLANNED = "planned"
    INACTIVE = "inactive"
    DONE = "done"

    @classmethod
    def parse(cls, value: Any) -> "PlanningStatus | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def generate_id(prefix: str) -> str:
    """Generate a unique entity id such as "txn-3f9a1c0d2b4e"."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def normalize_name(name: Any) -> str:
    """Case- and whitespace-insensitive key used for name matching."""
    return str(name or "").strip().lower()


def coerce_id(value: Any) -> str | None:
    """Normalize an entity reference: empty values become None, others strings."""
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def clamp_billing_day(value: float) -> int:
    """Billing day of month in 1..31; zero or negative values mean the 1st."""
    day = int(value)
    if day < 1:
        return 1
    return min(day, 31)


@dataclass(frozen=True)
class Account:
    """
    Money account.

    The same shape serves both ledgers: in `LedgerState.accounts` the balance is
    the derived current balance; in `LedgerState.base_accounts` it is the
    baseline before any transaction is applied.
    """

    id: str
    name: str
    balance: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "balance": self.balance}


@dataclass(frozen=True)
class Transaction:
    """
    Ledger transaction.

    The amount is always unsigned. Direction is carried by `type` together with
    `from_account` / `to_account`:

    - expense: money leaves `from_account`
    - income / opening: money enters `to_account`
    - transfer: money moves from `from_account` to `to_account`
    """

    id: str
    type: TransactionType
    amount: float
    date: str
    cycle_id: str
    from_account: str | None = None
    to_account: str | None = None
    category_id: str | None = None
    note: str = ""
    planning_cost_id: str | None = None

    def validate(self) -> list[str]:
        """Return invariant violations; an empty list means the transaction is well formed."""
        errors = []
        if self.amount < 0:
            errors.append("Amount must not be negative")

        if self.type == TransactionType.EXPENSE and not self.from_account:
            errors.append("Expense requires fromAccount")
        elif self.type == TransactionType.INCOME and not self.to_account:
            errors.append("Income requires toAccount")
        elif self.type == TransactionType.TRANSFER:
            if not self.from_account or not self.to_account:
                errors.append("Transfer requires fromAccount and toAccount")
            elif self.from_account == self.to_account:
                errors.append("Transfer accounts must differ")
        elif self.type == TransactionType.OPENING:
            if not self.to_account:
                errors.append("Opening balance requires toAccount")
            if self.from_account:
                errors.append("Opening balance must not have fromAccount")
            if self.category_id is not None:
                errors.append("Opening balance must not have a category")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    @property
    def account_ids(self) -> tuple[str, ...]:
        """Ids of the accounts this transaction touches."""
        return tuple(acc for acc in (self.from_account, self.to_account) if acc)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type.value,
            "amount": self.amount,
            "fromAccount": self.from_account,
            "toAccount": self.to_account,
            "categoryId": self.category_id,
            "cycleId": self.cycle_id,
            "note": self.note,
            "date": self.date,
        }
        if self.planning_cost_id:
            data["planningCostId"] = self.planning_cost_id
        return data


@dataclass(frozen=True)
class Category:
    """Spending or income category. Categories are disabled rather than deleted."""

    id: str
    name: str
    type: CategoryType = CategoryType.EXPENSE
    disabled: bool = False

    @property
    def is_reserved(self) -> bool:
        return self.id == UNCATEGORIZED_ID

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "disabled": self.disabled,
        }


@dataclass(frozen=True)
class BudgetProfile:
    """Budget amounts per category for one billing cycle."""

    cycle_id: str
    budgets: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return sum(self.budgets.values())

    def to_dict(self) -> dict[str, Any]:
        return {"cycleId": self.cycle_id, "budgets": dict(self.budgets)}


@dataclass(frozen=True)
class PlanningCost:
    """A scheduled cost that becomes a real expense once paid."""

    id: str
    name: str
    amount: float
    category_id: str
    billing_day: int
    cycle_id: str
    status: PlanningStatus = PlanningStatus.PLANNED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "categoryId": self.category_id,
            "billingDay": self.billing_day,
            "cycleId": self.cycle_id,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class LedgerState:
    """
    Root ledger snapshot.

    Invariant: every account balance equals its base balance plus the signed
    effect of every transaction touching it. Only the balance engine produces
    `accounts`; commands change `base_accounts` and `transactions`.
    """

    accounts: tuple[Account, ...] = ()
    base_accounts: tuple[Account, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    categories: tuple[Category, ...] = ()
    budgets: tuple[BudgetProfile, ...] = ()
    planning_costs: tuple[PlanningCost, ...] = ()

    def find_account(self, account_id: Any) -> Account | None:
        return next((acc for acc in self.accounts if acc.id == account_id), None)

    def find_transaction(self, transaction_id: Any) -> Transaction | None:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def find_category(self, category_id: Any) -> Category | None:
        return next((cat for cat in self.categories if cat.id == category_id), None)

    def find_category_by_name(self, name: Any) -> Category | None:
        key = normalize_name(name)
        if not key:
            return None
        return next((cat for cat in self.categories if normalize_name(cat.name) == key), None)

    def find_planning_cost(self, cost_id: Any) -> PlanningCost | None:
        return next((cost for cost in self.planning_costs if cost.id == cost_id), None)

    def budget_profile(self, cycle_id: str) -> BudgetProfile | None:
        return next((profile for profile in self.budgets if profile.cycle_id == cycle_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON snapshot persisted by the dashboard."""
        return {
            "accounts": [acc.to_dict() for acc in self.accounts],
            "baseAccounts": [acc.to_dict() for acc in self.base_accounts],
            "transactions": [t.to_dict() for t in self.transactions],
            "categories": [cat.to_dict() for cat in self.categories],
            "budgets": [profile.to_dict() for profile in self.budgets],
            "planningCosts": [cost.to_dict() for cost in self.planning_costs],
        }
