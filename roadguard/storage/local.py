"""
Local storage implementations.

These are in-memory or filesystem-based implementations
that work without any external services.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from roadguard.config import Settings, get_settings
from roadguard.storage.base import StateStorage

logger = logging.getLogger(__name__)


# =============================================================================
# In-Memory State Storage
# =============================================================================


class InMemoryStateStorage(StateStorage):
    """In-memory record storage for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, dict[str, Any]] | None = None):
        self._records: dict[str, dict[str, Any]] = copy.deepcopy(initial or {})

    async def load(self, name: str) -> dict[str, Any] | None:
        record = self._records.get(name)
        # Callers must never share structure with what is stored
        return copy.deepcopy(record) if record is not None else None

    async def save(self, name: str, data: dict[str, Any]) -> None:
        self._records[name] = copy.deepcopy(data)

    async def delete(self, name: str) -> bool:
        return self._records.pop(name, None) is not None

    def __contains__(self, name: str) -> bool:
        return name in self._records


# =============================================================================
# JSON File State Storage
# =============================================================================


class JsonFileStateStorage(StateStorage):
    """Store each record as a JSON file on the local filesystem."""

    def __init__(self, base_path: str = "./data/state"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _name_to_path(self, name: str) -> Path:
        safe = name.replace("/", "_").replace("\\", "_")
        return self.base_path / f"{safe}.json"

    async def load(self, name: str) -> dict[str, Any] | None:
        path = self._name_to_path(name)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable state record {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring state record {path}: not a JSON object")
            return None
        return data

    async def save(self, name: str, data: dict[str, Any]) -> None:
        path = self._name_to_path(name)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        # Replace atomically so readers never see half a snapshot
        os.replace(tmp_path, path)

    async def delete(self, name: str) -> bool:
        path = self._name_to_path(name)
        if path.exists():
            path.unlink()
            return True
        return False


# =============================================================================
# Factory
# =============================================================================


def create_state_storage(settings: Settings | None = None) -> StateStorage:
    """Create the StateStorage configured in settings."""
    settings = settings or get_settings()
    if settings.state_backend == "memory":
        return InMemoryStateStorage()
    if settings.state_backend == "file":
        return JsonFileStateStorage(settings.state_dir)
    raise ValueError(f"Unknown state backend: {settings.state_backend}")
