"""
Core module - shared infrastructure.

This module contains:
- events: State-change event bus used by the coordinator and bindings
"""

from roadguard.core.events import (
    StateEvent,
    EventBus,
    Subscription,
    LANGUAGE_CHANGED,
    TRANSLATIONS_UPDATED,
    TRANSLATIONS_CLEARED,
    STATUS_CHANGED,
)

__all__ = [
    "StateEvent",
    "EventBus",
    "Subscription",
    "LANGUAGE_CHANGED",
    "TRANSLATIONS_UPDATED",
    "TRANSLATIONS_CLEARED",
    "STATUS_CHANGED",
]
