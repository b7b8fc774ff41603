"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from ledger.core import config as config_module
from ledger.core.models import LedgerState
from ledger.engine import build_seed_state, normalize_state

# Inside billing cycle 2026-02 (2026-01-27 .. 2026-02-26)
TODAY = date(2026, 2, 10)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def seed_state(today) -> LedgerState:
    """Seed Builder output before any normalization."""
    return build_seed_state(today=today)


@pytest.fixture
def ledger_state(today) -> LedgerState:
    """Normalized starting ledger (seed plus opening-balance migration)."""
    return normalize_state(None, today=today)


@pytest.fixture
def legacy_snapshot() -> dict[str, Any]:
    """
    Snapshot in the oldest persisted shape.

    No base accounts, free-text category names instead of ids, no cycle ids and
    the old `active` flag on categories.
    """
    return {
        "accounts": [
            {"id": "wallet", "name": "Wallet", "balance": 700},
            {"id": "bank", "name": "Bank", "balance": "1,500"},
        ],
        "transactions": [
            {
                "id": "t1",
                "type": "expense",
                "amount": 300,
                "fromAccount": "wallet",
                "category": "food and drinks",
                "date": "2026-01-27",
            },
            {
                "id": "t2",
                "type": "income",
                "amount": 500,
                "toAccount": "bank",
                "category": "Salary",
                "date": "2026-02-03",
            },
        ],
        "categories": [{"id": "cat-food-and-drinks", "name": "Food and Drinks", "active": False}],
    }


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real ledger data
    monkeypatch.setenv("LEDGER_ENV", "test")
    monkeypatch.setenv("LEDGER_DATA_DIR", str(tmp_path / "ledger_data"))
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LEDGER_CURRENCY", raising=False)
    monkeypatch.delenv("LEDGER_CYCLE_RANGE", raising=False)

    # Fresh configuration per test
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for complete workflows")
    config.addinivalue_line("markers", "properties: Ledger-wide invariants checked across command sequences")
    config.addinivalue_line("markers", "slow: Tests that take significant time to run")
