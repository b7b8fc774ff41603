#!/usr/bin/env python3
"""
Command Processor

The single state-transition function of the ledger:

    process_command(state, command) -> new state

Commands are `{type, payload}` pairs. Processing never raises for bad input:
an unknown command type, a missing required field, a non-numeric amount, an
unknown id, or a change that would break a transaction invariant all return the
input state object unchanged. Every command that affects balances recomputes
them before returning.

Referential rules:
- New or edited transactions may only reference existing accounts and categories
- Accounts are never deleted
- Categories are deleted only while unreferenced
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..core.amounts import parse_amount
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
from .balances import recalculate_balances
from .references import can_delete_category, can_disable_category
from .seed import create_category_id

logger = logging.getLogger(__name__)


class CommandType(str, Enum):
    """Every command the processor understands."""

    ADD_TRANSACTION = "ADD_TRANSACTION"
    UPDATE_TRANSACTION = "UPDATE_TRANSACTION"
    DELETE_TRANSACTION = "DELETE_TRANSACTION"
    ADD_ACCOUNT = "ADD_ACCOUNT"
    SET_OPENING_BALANCE = "SET_OPENING_BALANCE"
    ADJUST_ACCOUNT_BALANCE = "ADJUST_ACCOUNT_BALANCE"
    ADD_CATEGORY = "ADD_CATEGORY"
    RENAME_CATEGORY = "RENAME_CATEGORY"
    UPDATE_CATEGORY = "UPDATE_CATEGORY"
    ENABLE_CATEGORY = "ENABLE_CATEGORY"
    DISABLE_CATEGORY = "DISABLE_CATEGORY"
    DELETE_CATEGORY = "DELETE_CATEGORY"
    UPDATE_BUDGET = "UPDATE_BUDGET"
    ADD_PLANNING_COST = "ADD_PLANNING_COST"
    UPDATE_PLANNING_COST = "UPDATE_PLANNING_COST"
    DELETE_PLANNING_COST = "DELETE_PLANNING_COST"
    SET_PLANNING_STATUS = "SET_PLANNING_STATUS"
    PAY_PLANNING_COST = "PAY_PLANNING_COST"
    RECALCULATE_BALANCES = "RECALCULATE_BALANCES"


@dataclass(frozen=True)
class Command:
    """A named command with its payload."""

    type: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Command":
        """Build a command from a `{type, payload}` mapping; malformed input yields an empty command."""
        if not isinstance(data, Mapping):
            return cls(type="")
        payload = data.get("payload")
        return cls(type=str(data.get("type") or ""), payload=payload if isinstance(payload, Mapping) else {})

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": dict(self.payload)}


Handler = Callable[[LedgerState, Mapping[str, Any], date | None], LedgerState]


# Payload helpers


def _provided(payload: Mapping[str, Any], key: str) -> bool:
    return payload.get(key) is not None


def _date_text(value: Any, today: date | None) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        return value.strip()
    return (today or date.today()).isoformat()


def _cycle_from_payload(payload: Mapping[str, Any], today: date | None) -> BillingCycle | None:
    """Cycle named in the payload, the current cycle when absent, None when malformed."""
    if not _provided(payload, "cycleId"):
        return current_cycle(today)
    return BillingCycle.from_id(payload["cycleId"])


def _resolve_category(state: LedgerState, payload: Mapping[str, Any], fallback: bool) -> str | None:
    """Category id from `categoryId`, else from a legacy `category` name."""
    category_id = coerce_id(payload.get("categoryId"))
    if category_id:
        return category_id
    if _provided(payload, "category"):
        category = state.find_category_by_name(payload["category"])
        return category.id if category else UNCATEGORIZED_ID
    return UNCATEGORIZED_ID if fallback else None


def _fit_sides(transaction: Transaction) -> Transaction:
    """Drop the account side a transaction type does not use."""
    if transaction.type == TransactionType.EXPENSE:
        return replace(transaction, to_account=None)
    if transaction.type in (TransactionType.INCOME, TransactionType.OPENING):
        return replace(transaction, from_account=None)
    return transaction


REFERENCE_FIELDS = ("from_account", "to_account", "category_id")


def _changed_references(before: Transaction, after: Transaction) -> tuple[str, ...]:
    return tuple(name for name in REFERENCE_FIELDS if getattr(before, name) != getattr(after, name))


def _rejection_reason(
    state: LedgerState, transaction: Transaction, checked: tuple[str, ...] = REFERENCE_FIELDS
) -> str | None:
    """
    Why a transaction may not enter the log, or None.

    Only the reference fields in `checked` must resolve; references carried
    over from an existing record may dangle.
    """
    errors = transaction.validate()
    if errors:
        return "; ".join(errors)
    for name in checked:
        reference = getattr(transaction, name)
        if reference is None:
            continue
        if name == "category_id":
            if state.find_category(reference) is None:
                return f"unknown category {reference}"
        elif state.find_account(reference) is None:
            return f"unknown account {reference}"
    if transaction.type == TransactionType.OPENING:
        for other in state.transactions:
            if (
                other.id != transaction.id
                and other.type == TransactionType.OPENING
                and other.to_account == transaction.to_account
                and other.cycle_id == transaction.cycle_id
            ):
                return f"{transaction.to_account} already has an opening balance for {transaction.cycle_id}"
    return None


def _opening_transaction(account_id: str, amount: float, cycle: BillingCycle) -> Transaction:
    return Transaction(
        id=generate_id("txn"),
        type=TransactionType.OPENING,
        amount=amount,
        date=cycle.first_of_month(),
        cycle_id=cycle.to_id(),
        to_account=account_id,
        note=OPENING_BALANCE_NOTE,
    )


# Transactions


def _add_transaction(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    amount = parse_amount(payload.get("amount"))
    transaction_type = TransactionType.parse(payload.get("type") or TransactionType.EXPENSE)
    if amount is None or transaction_type is None:
        return state

    transaction_date = _date_text(payload.get("date"), today)
    cycle = BillingCycle.from_id(payload.get("cycleId"))
    if cycle is None and _provided(payload, "cycleId"):
        return state
    transaction = _fit_sides(
        Transaction(
            id=generate_id("txn"),
            type=transaction_type,
            amount=abs(amount),
            date=transaction_date,
            cycle_id=cycle.to_id() if cycle else derive_cycle_id(transaction_date, today),
            from_account=coerce_id(payload.get("fromAccount")),
            to_account=coerce_id(payload.get("toAccount")),
            category_id=None
            if transaction_type == TransactionType.OPENING
            else _resolve_category(state, payload, fallback=True),
            note=str(payload.get("note") or ""),
        )
    )

    reason = _rejection_reason(state, transaction)
    if reason:
        logger.debug(f"Rejected new transaction: {reason}")
        return state
    return recalculate_balances(replace(state, transactions=state.transactions + (transaction,)))


def _update_transaction(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    existing = state.find_transaction(coerce_id(payload.get("id")))
    if existing is None:
        return state

    changes: dict[str, Any] = {}
    if _provided(payload, "type"):
        changes["type"] = TransactionType.parse(payload["type"])
        if changes["type"] is None:
            return state
    if "amount" in payload:
        amount = parse_amount(payload["amount"])
        if amount is None:
            return state
        changes["amount"] = abs(amount)
    if "fromAccount" in payload:
        changes["from_account"] = coerce_id(payload["fromAccount"])
    if "toAccount" in payload:
        changes["to_account"] = coerce_id(payload["toAccount"])
    if _provided(payload, "note"):
        changes["note"] = str(payload["note"])
    if _provided(payload, "date"):
        changes["date"] = _date_text(payload["date"], today)

    new_type = changes.get("type", existing.type)
    if new_type == TransactionType.OPENING:
        changes["category_id"] = None
    else:
        changes["category_id"] = (
            _resolve_category(state, payload, fallback=False) or existing.category_id or UNCATEGORIZED_ID
        )

    if _provided(payload, "cycleId"):
        cycle = BillingCycle.from_id(payload["cycleId"])
        if cycle is None:
            return state
        changes["cycle_id"] = cycle.to_id()
    elif changes.get("date", existing.date) != existing.date:
        changes["cycle_id"] = derive_cycle_id(changes["date"], today)

    updated = _fit_sides(replace(existing, **changes))
    if updated == existing:
        return state

    reason = _rejection_reason(state, updated, _changed_references(existing, updated))
    if reason:
        logger.debug(f"Rejected update of {existing.id}: {reason}")
        return state

    transactions = tuple(updated if t.id == existing.id else t for t in state.transactions)
    return recalculate_balances(replace(state, transactions=transactions))


def _delete_transaction(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    transaction_id = coerce_id(payload.get("id"))
    if state.find_transaction(transaction_id) is None:
        return state
    transactions = tuple(t for t in state.transactions if t.id != transaction_id)
    return recalculate_balances(replace(state, transactions=transactions))


# Accounts


def _add_account(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    opening_amount = 0.0
    if _provided(payload, "balance"):
        opening_amount = parse_amount(payload["balance"])
        if opening_amount is None or opening_amount < 0:
            return state

    account = Account(id=generate_id("acc"), name=str(payload.get("name") or "").strip() or "New Account")
    transactions = state.transactions
    if opening_amount:
        transactions = transactions + (_opening_transaction(account.id, opening_amount, current_cycle(today)),)

    logger.debug(f"Adding account {account.id} ({account.name})")
    return recalculate_balances(
        replace(
            state,
            accounts=state.accounts + (account,),
            base_accounts=state.base_accounts + (account,),
            transactions=transactions,
        )
    )


def _set_opening_balance(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    account_id = coerce_id(payload.get("accountId"))
    amount = parse_amount(payload.get("amount"))
    cycle = _cycle_from_payload(payload, today)
    if state.find_account(account_id) is None or amount is None or amount < 0 or cycle is None:
        return state

    def is_target(transaction: Transaction) -> bool:
        return (
            transaction.type == TransactionType.OPENING
            and transaction.to_account == account_id
            and transaction.cycle_id == cycle.to_id()
        )

    remaining = tuple(t for t in state.transactions if not is_target(t))
    if amount:
        transactions = remaining + (_opening_transaction(account_id, amount, cycle),)
    elif len(remaining) == len(state.transactions):
        return state
    else:
        transactions = remaining

    return recalculate_balances(replace(state, transactions=transactions))


def _adjust_account_balance(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    account = state.find_account(coerce_id(payload.get("accountId")))
    target = parse_amount(payload.get("targetBalance"))
    if account is None or target is None:
        return state

    delta = target - account.balance
    if not delta:
        return state

    base_accounts = tuple(
        replace(base, balance=base.balance + delta) if base.id == account.id else base for base in state.base_accounts
    )
    return recalculate_balances(replace(state, base_accounts=base_accounts))


# Categories


def _name_taken(state: LedgerState, name: str, ignore_id: str | None = None) -> bool:
    key = normalize_name(name)
    return any(normalize_name(cat.name) == key and cat.id != ignore_id for cat in state.categories)


def _add_category(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    name = str(payload.get("name") or "").strip()
    category_type = CategoryType.parse(payload.get("type") or CategoryType.EXPENSE)
    if not name or category_type is None or _name_taken(state, name):
        return state

    existing_ids = [cat.id for cat in state.categories]
    category_id = coerce_id(payload.get("id")) or create_category_id(name, existing_ids)
    if category_id in existing_ids:
        return state

    category = Category(id=category_id, name=name, type=category_type)
    return replace(state, categories=state.categories + (category,))


def _replace_category(state: LedgerState, updated: Category) -> LedgerState:
    categories = tuple(updated if cat.id == updated.id else cat for cat in state.categories)
    return replace(state, categories=categories)


def _update_category(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    category = state.find_category(coerce_id(payload.get("id")))
    if category is None:
        return state

    changes: dict[str, Any] = {}
    if _provided(payload, "name"):
        name = str(payload["name"]).strip()
        if not name or _name_taken(state, name, ignore_id=category.id):
            return state
        changes["name"] = name
    if _provided(payload, "type"):
        changes["type"] = CategoryType.parse(payload["type"])
        if changes["type"] is None:
            return state

    updated = replace(category, **changes)
    if updated == category:
        return state
    return _replace_category(state, updated)


def _set_category_disabled(disabled: bool) -> Handler:
    def handler(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
        category_id = coerce_id(payload.get("id"))
        if not can_disable_category(state, category_id):
            return state
        category = state.find_category(category_id)
        if category.disabled == disabled:
            return state
        return _replace_category(state, replace(category, disabled=disabled))

    return handler


def _delete_category(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    category_id = coerce_id(payload.get("id"))
    if not can_delete_category(state, category_id):
        return state

    # Remaining budget entries for the category are all zero
    budgets = tuple(
        BudgetProfile(
            cycle_id=profile.cycle_id,
            budgets={key: amount for key, amount in profile.budgets.items() if key != category_id},
        )
        for profile in state.budgets
    )
    categories = tuple(cat for cat in state.categories if cat.id != category_id)
    return replace(state, categories=categories, budgets=budgets)


# Budgets


def _update_budget(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    category_id = coerce_id(payload.get("categoryId"))
    amount = parse_amount(payload.get("amount"))
    cycle = _cycle_from_payload(payload, today)
    if state.find_category(category_id) is None or amount is None or amount < 0 or cycle is None:
        return state

    profile = state.budget_profile(cycle.to_id())
    if profile is None:
        budgets = state.budgets + (BudgetProfile(cycle_id=cycle.to_id(), budgets={category_id: amount}),)
    elif profile.budgets.get(category_id) == amount:
        return state
    else:
        updated = BudgetProfile(cycle_id=profile.cycle_id, budgets={**profile.budgets, category_id: amount})
        budgets = tuple(updated if p.cycle_id == profile.cycle_id else p for p in state.budgets)
    return replace(state, budgets=budgets)


# Planning costs


def _planning_changes(state: LedgerState, payload: Mapping[str, Any]) -> dict[str, Any] | None:
    """Validated field changes from a planning-cost payload; None when any field is invalid."""
    changes: dict[str, Any] = {}
    if _provided(payload, "name"):
        changes["name"] = str(payload["name"]).strip()
        if not changes["name"]:
            return None
    if _provided(payload, "amount"):
        amount = parse_amount(payload["amount"])
        if amount is None:
            return None
        changes["amount"] = abs(amount)
    if _provided(payload, "categoryId"):
        changes["category_id"] = coerce_id(payload["categoryId"])
        if state.find_category(changes["category_id"]) is None:
            return None
    if _provided(payload, "billingDay"):
        day = parse_amount(payload["billingDay"])
        if day is None:
            return None
        changes["billing_day"] = clamp_billing_day(day)
    if _provided(payload, "cycleId"):
        cycle = BillingCycle.from_id(payload["cycleId"])
        if cycle is None:
            return None
        changes["cycle_id"] = cycle.to_id()
    if _provided(payload, "status"):
        changes["status"] = PlanningStatus.parse(payload["status"])
        if changes["status"] is None:
            return None
    return changes


def _add_planning_cost(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    changes = _planning_changes(state, payload)
    if changes is None or not changes.get("name"):
        return state

    cost = PlanningCost(
        id=generate_id("plan"),
        name=changes["name"],
        amount=changes.get("amount", 0.0),
        category_id=changes.get("category_id", UNCATEGORIZED_ID),
        billing_day=changes.get("billing_day", 1),
        cycle_id=changes.get("cycle_id", current_cycle(today).to_id()),
        status=changes.get("status", PlanningStatus.PLANNED),
    )
    return replace(state, planning_costs=state.planning_costs + (cost,))


def _replace_planning_cost(state: LedgerState, updated: PlanningCost) -> LedgerState:
    costs = tuple(updated if cost.id == updated.id else cost for cost in state.planning_costs)
    return replace(state, planning_costs=costs)


def _update_planning_cost(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    cost = state.find_planning_cost(coerce_id(payload.get("id")))
    changes = _planning_changes(state, payload)
    if cost is None or changes is None:
        return state

    updated = replace(cost, **changes)
    if updated == cost:
        return state
    return _replace_planning_cost(state, updated)


def _delete_planning_cost(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    cost_id = coerce_id(payload.get("id"))
    if state.find_planning_cost(cost_id) is None:
        return state
    return replace(state, planning_costs=tuple(cost for cost in state.planning_costs if cost.id != cost_id))


def _set_planning_status(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    cost = state.find_planning_cost(coerce_id(payload.get("id")))
    status = PlanningStatus.parse(payload.get("status"))
    if cost is None or status is None or cost.status == status:
        return state
    return _replace_planning_cost(state, replace(cost, status=status))


def _pay_planning_cost(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    """
    Realize a planning cost as an expense from the given account.

    The expense carries the cost's amount, category and cycle and records the
    cost's id. A cost that is already done cannot be paid again.
    """
    cost = state.find_planning_cost(coerce_id(payload.get("planningCostId")))
    account = state.find_account(coerce_id(payload.get("accountId")))
    if cost is None or account is None:
        return state
    if cost.status == PlanningStatus.DONE:
        logger.debug(f"Planning cost {cost.id} is already paid")
        return state

    transaction = Transaction(
        id=generate_id("txn"),
        type=TransactionType.EXPENSE,
        amount=cost.amount,
        date=_date_text(payload.get("date"), today),
        cycle_id=cost.cycle_id,
        from_account=account.id,
        category_id=cost.category_id,
        note=cost.name,
        planning_cost_id=cost.id,
    )
    reason = _rejection_reason(state, transaction, ("from_account",))
    if reason:
        logger.debug(f"Cannot pay planning cost {cost.id}: {reason}")
        return state

    paid = _replace_planning_cost(state, replace(cost, status=PlanningStatus.DONE))
    return recalculate_balances(replace(paid, transactions=paid.transactions + (transaction,)))


def _recalculate(state: LedgerState, payload: Mapping[str, Any], today: date | None) -> LedgerState:
    return recalculate_balances(state)


_HANDLERS: dict[str, Handler] = {
    CommandType.ADD_TRANSACTION.value: _add_transaction,
    CommandType.UPDATE_TRANSACTION.value: _update_transaction,
    CommandType.DELETE_TRANSACTION.value: _delete_transaction,
    CommandType.ADD_ACCOUNT.value: _add_account,
    CommandType.SET_OPENING_BALANCE.value: _set_opening_balance,
    CommandType.ADJUST_ACCOUNT_BALANCE.value: _adjust_account_balance,
    CommandType.ADD_CATEGORY.value: _add_category,
    CommandType.RENAME_CATEGORY.value: _update_category,
    CommandType.UPDATE_CATEGORY.value: _update_category,
    CommandType.ENABLE_CATEGORY.value: _set_category_disabled(False),
    CommandType.DISABLE_CATEGORY.value: _set_category_disabled(True),
    CommandType.DELETE_CATEGORY.value: _delete_category,
    CommandType.UPDATE_BUDGET.value: _update_budget,
    CommandType.ADD_PLANNING_COST.value: _add_planning_cost,
    CommandType.UPDATE_PLANNING_COST.value: _update_planning_cost,
    CommandType.DELETE_PLANNING_COST.value: _delete_planning_cost,
    CommandType.SET_PLANNING_STATUS.value: _set_planning_status,
    CommandType.PAY_PLANNING_COST.value: _pay_planning_cost,
    CommandType.RECALCULATE_BALANCES.value: _recalculate,
}


def process_command(
    state: LedgerState, command: Command | Mapping[str, Any], *, today: date | None = None
) -> LedgerState:
    """
    Apply one command to a ledger state.

    Args:
        state: Current normalized ledger state
        command: Command, or a `{type, payload}` mapping
        today: Pin the current date (default: system date)

    Returns:
        The new state, or `state` itself when the command was ignored
    """
    if not isinstance(command, Command):
        command = Command.from_dict(command)

    command_type = command.type.value if isinstance(command.type, CommandType) else command.type
    handler = _HANDLERS.get(command_type)
    if handler is None:
        logger.debug(f"Ignoring unknown command type {command_type!r}")
        return state

    payload = command.payload if isinstance(command.payload, Mapping) else {}
    new_state = handler(state, payload, today)
    if new_state is state:
        logger.debug(f"{command_type} left the ledger unchanged")
    return new_state


def process_commands(
    state: LedgerState, commands: Iterable[Command | Mapping[str, Any]], *, today: date | None = None
) -> LedgerState:
    """Apply commands one at a time in order."""
    for command in commands:
        state = process_command(state, command, today=today)
    return state
