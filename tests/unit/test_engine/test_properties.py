#!/usr/bin/env python3
"""Ledger-wide invariants checked across command sequences."""

import random
from datetime import date

import pytest

from ledger.core.models import UNCATEGORIZED_ID, TransactionType
from ledger.engine.balances import check_balance_invariant
from ledger.engine.commands import CommandType, process_command
from ledger.engine.normalizer import normalize_state

TODAY = date(2026, 2, 10)

pytestmark = pytest.mark.properties


def run(state, command_type, **payload):
    return process_command(state, {"type": command_type, "payload": payload}, today=TODAY)


def random_command(rng: random.Random, state) -> dict:
    """Build a plausible (sometimes invalid) command against the current state."""
    account_ids = [acc.id for acc in state.accounts] + ["acc-missing"]
    category_ids = [cat.id for cat in state.categories] + ["cat-missing"]
    transaction_ids = [t.id for t in state.transactions] + ["txn-missing"]
    cost_ids = [cost.id for cost in state.planning_costs] + ["plan-missing"]
    amount = rng.choice([0, 1, 12.5, 300, 1999.99, -40, "abc", None])
    cycle_id = rng.choice([None, "2026-01", "2026-02", "2026-03", "bad"])

    choices = [
        ("ADD_TRANSACTION", {
            "type": rng.choice(["expense", "income", "transfer", "opening", "refund"]),
            "amount": amount,
            "fromAccount": rng.choice(account_ids),
            "toAccount": rng.choice(account_ids),
            "categoryId": rng.choice(category_ids),
            "cycleId": cycle_id,
        }),
        ("UPDATE_TRANSACTION", {"id": rng.choice(transaction_ids), "amount": amount}),
        ("UPDATE_TRANSACTION", {"id": rng.choice(transaction_ids), "fromAccount": rng.choice(account_ids)}),
        ("DELETE_TRANSACTION", {"id": rng.choice(transaction_ids)}),
        ("ADD_ACCOUNT", {"name": "Random", "balance": amount}),
        ("SET_OPENING_BALANCE", {"accountId": rng.choice(account_ids), "amount": amount, "cycleId": cycle_id}),
        ("ADJUST_ACCOUNT_BALANCE", {"accountId": rng.choice(account_ids), "targetBalance": amount}),
        ("DISABLE_CATEGORY", {"id": rng.choice(category_ids)}),
        ("DELETE_CATEGORY", {"id": rng.choice(category_ids)}),
        ("PAY_PLANNING_COST", {"planningCostId": rng.choice(cost_ids), "accountId": rng.choice(account_ids)}),
        ("RECALCULATE_BALANCES", {}),
    ]
    command_type, payload = rng.choice(choices)
    return {"type": command_type, "payload": payload}


class TestBalanceInvariant:
    """Balances always equal base plus signed transaction effects."""

    @pytest.mark.parametrize("seed", range(10))
    def test_invariant_holds_after_every_command(self, seed):
        rng = random.Random(seed)
        state = normalize_state(None, today=TODAY)

        for _ in range(40):
            state = process_command(state, random_command(rng, state), today=TODAY)
            assert check_balance_invariant(state) == []

    @pytest.mark.parametrize("seed", range(5))
    def test_transactions_stay_valid_and_referenced(self, seed):
        rng = random.Random(seed)
        state = normalize_state(None, today=TODAY)

        for _ in range(40):
            state = process_command(state, random_command(rng, state), today=TODAY)

        account_ids = {acc.id for acc in state.accounts}
        category_ids = {cat.id for cat in state.categories}
        for transaction in state.transactions:
            assert transaction.is_valid
            assert set(transaction.account_ids) <= account_ids
            assert transaction.category_id is None or transaction.category_id in category_ids

    @pytest.mark.parametrize("seed", range(5))
    def test_at_most_one_opening_per_account_and_cycle(self, seed):
        rng = random.Random(seed)
        state = normalize_state(None, today=TODAY)

        for _ in range(60):
            state = process_command(state, random_command(rng, state), today=TODAY)

        keys = [(t.to_account, t.cycle_id) for t in state.transactions if t.type == TransactionType.OPENING]
        assert len(keys) == len(set(keys))


class TestRoundTrips:
    """Commands that cancel each other restore balances."""

    def setup_method(self):
        self.state = normalize_state(None, today=TODAY)

    def test_opening_balance_set_and_cleared(self):
        raised = run(self.state, "SET_OPENING_BALANCE", accountId="acc-1", amount=500, cycleId="2026-03")
        cleared = run(raised, "SET_OPENING_BALANCE", accountId="acc-1", amount=0, cycleId="2026-03")

        assert raised.find_account("acc-1").balance == pytest.approx(903)
        assert cleared.find_account("acc-1").balance == pytest.approx(403)
        assert cleared.transactions == self.state.transactions

    def test_add_then_delete_transaction(self):
        added = run(self.state, "ADD_TRANSACTION", amount=75, fromAccount="acc-2")
        removed = run(added, "DELETE_TRANSACTION", id=added.transactions[-1].id)

        assert removed.accounts == self.state.accounts

    def test_pay_planning_cost_debits_account(self):
        with_account = run(self.state, "ADD_ACCOUNT", name="A", balance=1000)
        account_id = with_account.accounts[-1].id
        with_cost = run(with_account, "ADD_PLANNING_COST", name="Rent", amount=300)
        cost_id = with_cost.planning_costs[-1].id

        paid = run(with_cost, "PAY_PLANNING_COST", planningCostId=cost_id, accountId=account_id)

        assert paid.find_account(account_id).balance == pytest.approx(700)
        assert paid.find_planning_cost(cost_id).category_id == UNCATEGORIZED_ID


class TestNoOpSafety:
    """Invalid commands return the same state object."""

    def setup_method(self):
        self.state = normalize_state(None, today=TODAY)

    @pytest.mark.parametrize(
        "command_type",
        [
            command_type
            for command_type in CommandType
            if command_type not in (CommandType.ADD_ACCOUNT, CommandType.RECALCULATE_BALANCES)
        ],
        ids=lambda command_type: command_type.value,
    )
    def test_empty_payload_is_a_no_op(self, command_type):
        assert process_command(self.state, {"type": command_type.value, "payload": {}}, today=TODAY) is self.state

    def test_unknown_type_is_a_no_op(self):
        assert run(self.state, "TRANSFER_EVERYTHING", amount=1) is self.state

    def test_reserved_category_survives_everything(self):
        state = self.state
        for command_type in ("DISABLE_CATEGORY", "DELETE_CATEGORY"):
            state = run(state, command_type, id=UNCATEGORIZED_ID)

        category = state.find_category(UNCATEGORIZED_ID)
        assert category is not None
        assert not category.disabled
