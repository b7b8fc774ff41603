#!/usr/bin/env python3
"""
Balance Engine

Current account balances are never stored as ground truth. They are produced by
replaying the transaction log on top of the base balances:

    balance(account) = base(account) + sum(signed effect of each transaction)

`recalculate_balances` is the only sanctioned way to produce `accounts`.
Transactions that reference an account id which no longer exists are skipped for
that side; reporting those references is left to `ledger.analysis`.
"""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace

from ..core.models import Account, LedgerState, Transaction, TransactionType

logger = logging.getLogger(__name__)


class LedgerContractError(TypeError):
    """Raised when engine functions are called with structurally invalid arguments."""


def _require_sequence(value: object, name: str) -> None:
    if not isinstance(value, (list, tuple)):
        raise LedgerContractError(f"{name} must be a list or tuple, got {type(value).__name__}")


def clone_balances(accounts: Iterable[Account]) -> dict[str, float]:
    """Working copy of balances keyed by account id, preserving account order."""
    return {account.id: account.balance for account in accounts}


def _adjust(balances: dict[str, float], account_id: str | None, delta: float) -> None:
    if not account_id or account_id not in balances:
        return
    balances[account_id] = balances[account_id] + delta


def apply_transaction(balances: dict[str, float], transaction: Transaction, direction: int = 1) -> None:
    """
    Apply one transaction's effect to a working copy of balances, in place.

    Args:
        balances: Mapping of account id to balance (see `clone_balances`)
        transaction: Transaction to apply
        direction: +1 to apply, -1 to reverse

    Raises:
        LedgerContractError: If direction is not +1 or -1
    """
    if direction not in (1, -1):
        raise LedgerContractError(f"direction must be +1 or -1, got {direction!r}")

    amount = transaction.amount * direction
    if not amount:
        return

    if transaction.type in (TransactionType.OPENING, TransactionType.INCOME):
        _adjust(balances, transaction.to_account, amount)
    elif transaction.type == TransactionType.EXPENSE:
        _adjust(balances, transaction.from_account, -amount)
    elif transaction.type == TransactionType.TRANSFER:
        _adjust(balances, transaction.from_account, -amount)
        _adjust(balances, transaction.to_account, amount)


def _replay(accounts: Sequence[Account], transactions: Sequence[Transaction], direction: int) -> tuple[Account, ...]:
    balances = clone_balances(accounts)
    for transaction in transactions:
        apply_transaction(balances, transaction, direction)
    return tuple(replace(account, balance=balances[account.id]) for account in accounts)


def recalculate_balances(state: LedgerState) -> LedgerState:
    """
    Rebuild current balances from base balances plus the full transaction log.

    Raises:
        LedgerContractError: If the base account list or transaction log is not a sequence
    """
    _require_sequence(state.base_accounts, "base_accounts")
    _require_sequence(state.transactions, "transactions")

    accounts = _replay(state.base_accounts, state.transactions, 1)
    return replace(state, accounts=accounts)


def derive_base_accounts_from_current(
    accounts: Sequence[Account], transactions: Sequence[Transaction]
) -> tuple[Account, ...]:
    """
    Reconstruct base balances from current balances by reversing every transaction.

    Used when migrating snapshots saved before base accounts were recorded.
    """
    _require_sequence(accounts, "accounts")
    _require_sequence(transactions, "transactions")
    return _replay(accounts, transactions, -1)


def signed_effects(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Net effect of the transaction log per referenced account id."""
    effects: dict[str, float] = {}
    for transaction in transactions:
        amount = transaction.amount
        if transaction.type in (TransactionType.OPENING, TransactionType.INCOME):
            targets = [(transaction.to_account, amount)]
        elif transaction.type == TransactionType.EXPENSE:
            targets = [(transaction.from_account, -amount)]
        elif transaction.type == TransactionType.TRANSFER:
            targets = [(transaction.from_account, -amount), (transaction.to_account, amount)]
        else:
            targets = []
        for account_id, delta in targets:
            if account_id:
                effects[account_id] = effects.get(account_id, 0.0) + delta
    return effects


def check_balance_invariant(state: LedgerState) -> list[str]:
    """
    Verify that every current balance equals base balance plus signed effects.

    Returns:
        Human-readable descriptions of each violation (empty when consistent)
    """
    problems = []
    effects = signed_effects(state.transactions)
    base_by_id = clone_balances(state.base_accounts)

    if [acc.id for acc in state.accounts] != [acc.id for acc in state.base_accounts]:
        problems.append("accounts and base accounts are out of lockstep")

    for account in state.accounts:
        expected = base_by_id.get(account.id, 0.0) + effects.get(account.id, 0.0)
        if not math.isclose(account.balance, expected, rel_tol=1e-9, abs_tol=1e-6):
            problems.append(f"{account.id}: balance {account.balance} != expected {expected}")

    return problems
