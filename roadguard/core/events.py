"""
Change notifications for translation state.

The coordinator publishes an event whenever the language, the cache or the
loading status changes. Bindings subscribe to the events that can affect
their text and re-resolve, so nothing polls the coordinator.

Event types:
    language.changed      payload: language, previous
    translations.updated  payload: keys, language
    translations.cleared  (no payload)
    status.changed        payload: is_loading, error
"""

from __future__ import annotations

import fnmatch
import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

EventHandler = Callable[["StateEvent"], Awaitable[None]]


LANGUAGE_CHANGED = "language.changed"
TRANSLATIONS_UPDATED = "translations.updated"
TRANSLATIONS_CLEARED = "translations.cleared"
STATUS_CHANGED = "status.changed"


@dataclass
class StateEvent:
    """One change to coordinator state."""

    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


def _payload_matches(actual: Any, expected: Any) -> bool:
    # "keys" is a list: a binding for one key matches any update containing it
    if isinstance(actual, (list, tuple, set, frozenset)):
        return expected in actual
    return actual == expected


@dataclass
class Subscription:
    """
    A handler bound to an event-type pattern.

    ``filter`` entries look like ``{"payload.keys": "signup.title"}``; every
    entry must match for the handler to run.
    """

    pattern: str
    handler: EventHandler
    filter: dict[str, Any] = field(default_factory=dict)

    def matches(self, event: StateEvent) -> bool:
        if not fnmatch.fnmatchcase(event.event_type, self.pattern):
            return False

        for path, expected in self.filter.items():
            scope, _, name = path.partition(".")
            if scope != "payload":
                continue
            if not _payload_matches(event.payload.get(name), expected):
                return False
        return True


class EventBus:
    """
    Per-coordinator publish/subscribe channel.

    Handlers run sequentially in subscription order. A handler that raises
    is logged and skipped; the remaining handlers still run.
    """

    def __init__(self, max_history: int = 1000):
        self._subscriptions: list[Subscription] = []
        self._history: deque[StateEvent] = deque(maxlen=max_history)

    def subscribe(
        self,
        pattern: str,
        handler: EventHandler,
        filter: dict[str, Any] | None = None,
    ) -> Subscription:
        """Register ``handler`` for event types matching ``pattern``."""
        subscription = Subscription(pattern, handler, dict(filter or {}))
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass

    async def publish(self, event: StateEvent) -> None:
        self._history.append(event)

        # Handlers may (un)subscribe while running
        targets = [s for s in self._subscriptions if s.matches(event)]
        for subscription in targets:
            try:
                await subscription.handler(event)
            except Exception:
                logger.exception(f"Handler for {event.event_type} failed")

    def get_history(self, event_type: str | None = None, limit: int = 100) -> list[StateEvent]:
        """Most recent events, optionally restricted to a type pattern."""
        events = [
            e for e in self._history
            if event_type is None or fnmatch.fnmatchcase(e.event_type, event_type)
        ]
        return events[-limit:]

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)


def language_changed(language: str, previous: str) -> StateEvent:
    return StateEvent(LANGUAGE_CHANGED, {"language": language, "previous": previous})


def translations_updated(keys: list[str], language: str) -> StateEvent:
    return StateEvent(TRANSLATIONS_UPDATED, {"keys": list(keys), "language": language})


def translations_cleared() -> StateEvent:
    return StateEvent(TRANSLATIONS_CLEARED)


def status_changed(is_loading: bool, error: str | None) -> StateEvent:
    return StateEvent(STATUS_CHANGED, {"is_loading": is_loading, "error": error})
