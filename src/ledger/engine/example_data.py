#!/usr/bin/env python3
"""
Bundled Example Data

Static sample household used to seed a fresh ledger: four accounts, a short
expense history from the January 2026 cycle, budget amounts by category name
and a list of monthly subscriptions.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ExampleData:
    """Raw example records the seed builder turns into a ledger state."""

    accounts: tuple[dict[str, Any], ...]
    categories: tuple[dict[str, Any], ...]
    transactions: tuple[dict[str, Any], ...]
    budget_categories: tuple[dict[str, Any], ...]
    subscriptions: tuple[dict[str, Any], ...]


EXAMPLE_DATA = ExampleData(
    accounts=(
        {"name": "Wallet", "balance": 403},
        {"name": "True Wallet", "balance": 106.13},
        {"name": "BK Bank", "balance": 604.07},
        {"name": "Line Pay", "balance": 54.7},
    ),
    categories=(
        {"name": "Food and Drinks", "type": "expense"},
        {"name": "Transportation", "type": "expense"},
        {"name": "Subscription", "type": "expense"},
        {"name": "Home", "type": "expense"},
        {"name": "Shopping", "type": "expense"},
        {"name": "Fix Cost", "type": "expense"},
        {"name": "Salary", "type": "income"},
    ),
    transactions=(
        {"id": 1, "transaction": "Yakiniku Like", "amount": 308, "category": "Food and Drinks",
         "method": "BK Bank", "date": "2026-01-26"},
        {"id": 2, "transaction": "Foodcourt", "amount": 95, "category": "Food and Drinks",
         "method": "True Wallet", "date": "2026-01-25"},
        {"id": 3, "transaction": "Commute Pass", "amount": 860, "category": "Transportation",
         "method": "Line Pay", "date": "2026-01-25"},
        {"id": 4, "transaction": "Netflix", "amount": 490, "category": "Subscription",
         "method": "BK Bank", "date": "2026-01-24"},
        {"id": 5, "transaction": "Internet True", "amount": 854.93, "category": "Home",
         "method": "True Wallet", "date": "2026-01-23"},
        {"id": 6, "transaction": "Grocery Run", "amount": 1260, "category": "Food and Drinks",
         "method": "BK Bank", "date": "2026-01-22"},
        {"id": 7, "transaction": "New Shoes", "amount": 1520, "category": "Shopping",
         "method": "BK Bank", "date": "2026-01-20"},
        {"id": 8, "transaction": "Grab Ride", "amount": 437, "category": "Transportation",
         "method": "True Wallet", "date": "2026-01-19"},
    ),
    budget_categories=(
        {"name": "Food and Drinks", "budget": 3200},
        {"name": "Transportation", "budget": 3700},
        {"name": "Subscription", "budget": 1682},
        {"name": "Home", "budget": 9466},
        {"name": "Shopping", "budget": 3500},
        {"name": "Fix Cost", "budget": 5473},
    ),
    subscriptions=(
        {"name": "Notion Plus", "cost": 200, "nextDate": "2026-02-02"},
        {"name": "Utility", "cost": 2460.66, "nextDate": "2026-01-29", "category": "Fix Cost"},
        {"name": "Netflix", "cost": 490, "nextDate": "2026-02-02"},
        {"name": "ChatGPT", "cost": 723.47, "nextDate": "2026-02-09"},
        {"name": "YouTube Premium", "cost": 179, "nextDate": "2026-02-21"},
        {"name": "Car", "cost": 4249, "nextDate": "2026-02-05", "category": "Fix Cost"},
    ),
)
