#!/usr/bin/env python3
"""
DataStore Mixin - Common functionality for file-backed stores.

Provides the metadata methods every store exposes and a summary value built
from them.
"""

from abc import abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class StoreSummary:
    """Point-in-time description of a store's contents."""

    exists: bool
    last_updated: datetime | None
    age_days: int | None
    item_count: int | None
    size_bytes: int | None
    summary_text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "exists": self.exists,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
            "ageDays": self.age_days,
            "itemCount": self.item_count,
            "sizeBytes": self.size_bytes,
            "summary": self.summary_text,
        }


class DataStoreMixin:
    """
    Mixin providing common DataStore functionality.

    Subclasses must implement:
    - exists() -> bool
    - last_modified() -> datetime | None
    - item_count() -> int | None
    - size_bytes() -> int | None
    - summary_text() -> str
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if data exists in storage."""
        ...

    @abstractmethod
    def last_modified(self) -> datetime | None:
        """Get timestamp of most recent data modification."""
        ...

    @abstractmethod
    def item_count(self) -> int | None:
        """Get count of items/records in stored data."""
        ...

    @abstractmethod
    def size_bytes(self) -> int | None:
        """Get total storage size in bytes."""
        ...

    @abstractmethod
    def summary_text(self) -> str:
        """Get human-readable summary of current data state."""
        ...

    def age_days(self) -> int | None:
        """
        Get age of data in days since last modification.

        Returns:
            Number of days since last modification, or None if data doesn't exist
        """
        last_mod = self.last_modified()
        if last_mod is None:
            return None
        return (datetime.now() - last_mod).days

    def to_summary(self) -> StoreSummary:
        return StoreSummary(
            exists=self.exists(),
            last_updated=self.last_modified(),
            age_days=self.age_days(),
            item_count=self.item_count(),
            size_bytes=self.size_bytes(),
            summary_text=self.summary_text(),
        )
