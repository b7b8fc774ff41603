#!/usr/bin/env python3
"""
Billing Cycle Resolver

A billing cycle runs from day 27 of one month through day 26 of the next and is
labeled by its end month ("YYYY-MM"). A date on or after the 27th therefore
belongs to the following month's cycle.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

CYCLE_CUTOVER_DAY = 27

_DATE_PREFIX = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})")
_CYCLE_ID = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


def parse_date(value: Any) -> date | None:
    """
    Parse a calendar date from a date, datetime or "YYYY-MM-DD" string.

    Strings only need to start with a year-month-day triple, so ISO timestamps
    such as "2026-01-27T09:30:00" are accepted.

    Returns:
        The date, or None when the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _DATE_PREFIX.match(value)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


@dataclass(frozen=True, order=True)
class BillingCycle:
    """Immutable billing cycle identified by the year and month it ends in."""

    year: int
    month: int

    @classmethod
    def from_id(cls, cycle_id: Any) -> "BillingCycle | None":
        """Parse a "YYYY-MM" label; returns None for anything else."""
        if not isinstance(cycle_id, str):
            return None
        match = _CYCLE_ID.match(cycle_id)
        if match is None:
            return None
        year, month = int(match.group(1)), int(match.group(2))
        if year <= 0 or not 1 <= month <= 12:
            return None
        return cls(year=year, month=month)

    @classmethod
    def for_date(cls, day: date) -> "BillingCycle":
        """Resolve the cycle a calendar date falls into."""
        cycle = cls(year=day.year, month=day.month)
        if day.day >= CYCLE_CUTOVER_DAY:
            return cycle.shift(1)
        return cycle

    def shift(self, months: int) -> "BillingCycle":
        """Return the cycle `months` cycles away (negative moves backwards)."""
        index = self.year * 12 + (self.month - 1) + months
        return BillingCycle(year=index // 12, month=index % 12 + 1)

    @property
    def start_date(self) -> date:
        """First day of the cycle (the cutover day of the previous month)."""
        previous = self.shift(-1)
        return date(previous.year, previous.month, CYCLE_CUTOVER_DAY)

    @property
    def end_date(self) -> date:
        """Last day of the cycle."""
        return date(self.year, self.month, CYCLE_CUTOVER_DAY - 1)

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def first_of_month(self) -> str:
        """ISO date of the 1st of the label month, used to date opening balances."""
        return f"{self.to_id()}-01"

    def to_id(self) -> str:
        """Format as YYYY-MM."""
        return f"{self.year:04d}-{self.month:02d}"

    def __str__(self) -> str:
        return self.to_id()


def derive_cycle_id(value: Any, today: date | None = None) -> str:
    """
    Map a calendar date to its billing-cycle label.

    Invalid or unparseable dates fall back to the current cycle.

    Examples:
        derive_cycle_id("2026-01-26") -> "2026-01"
        derive_cycle_id("2026-01-27") -> "2026-02"
        derive_cycle_id("2025-12-31") -> "2026-01"
    """
    day = parse_date(value)
    if day is None:
        return current_cycle_id(today)
    return BillingCycle.for_date(day).to_id()


def current_cycle_id(today: date | None = None) -> str:
    """Label of the cycle containing `today` (default: the system date)."""
    return BillingCycle.for_date(today or date.today()).to_id()


def current_cycle(today: date | None = None) -> BillingCycle:
    return BillingCycle.for_date(today or date.today())


def build_cycle_options(center: Any, cycle_range: int = 3) -> list[str]:
    """
    Build `2 * cycle_range + 1` consecutive cycle labels centered on `center`, ascending.

    Args:
        center: Cycle label ("YYYY-MM") to center on
        cycle_range: Number of cycles on each side of the center

    Returns:
        Ordered list of labels, or an empty list when `center` is not a cycle label
    """
    cycle = BillingCycle.from_id(center)
    if cycle is None:
        return []
    span = max(0, int(cycle_range))
    return [cycle.shift(offset).to_id() for offset in range(-span, span + 1)]
