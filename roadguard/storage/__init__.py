"""
Storage abstractions for persisted translation state.
"""

from roadguard.storage.base import (
    StateStorage,
    Records,
)
from roadguard.storage.local import (
    InMemoryStateStorage,
    JsonFileStateStorage,
    create_state_storage,
)

__all__ = [
    "StateStorage",
    "Records",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "create_state_storage",
]
