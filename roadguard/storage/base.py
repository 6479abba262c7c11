"""
Storage abstraction for persisted state.

Durable state goes through this interface so the coordinator does not care
whether records live in a JSON file, in memory, or somewhere else.

Records are whole-object snapshots: every save replaces the previous
value for that name. There is no partial-write protocol.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StateStorage(ABC):
    """
    Durable key-value store for JSON-compatible records.

    Local Implementation: JSON files on disk
    Test Implementation: In-memory dict
    """

    @abstractmethod
    async def load(self, name: str) -> dict[str, Any] | None:
        """Load a record, or None if it does not exist."""
        pass

    @abstractmethod
    async def save(self, name: str, data: dict[str, Any]) -> None:
        """Store a record, replacing any previous value."""
        pass

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Delete a record. Returns True if it existed."""
        pass


class Records:
    """Standard record names."""

    LANGUAGE_STORE = "language-store"
    BACKEND_TRANSLATIONS = "translations"
