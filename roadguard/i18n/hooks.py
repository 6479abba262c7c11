"""
Per-component translation bindings.

Each binding belongs to one UI call site. It resolves its text through the
coordinator and re-resolves whenever its inputs change or the coordinator
announces a relevant state change (language switch, cache update for its
key, cache clear).

Bindings must be created while an event loop is running: cache misses are
resolved in a background task.

Usage:
    binding = use_translation(coordinator, "signup.title", "Create your account")
    render(binding.t)            # source text until resolved
    await binding.settled()
    render(binding.t)            # translated text

    use_batch_translation(coordinator, [
        TranslationItem("footer.towing", "Towing"),
        TranslationItem("footer.fuel", "Fuel Delivery"),
    ])

    controls = use_language(coordinator)
    await controls.change_language("hi")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Callable

from roadguard.core.events import (
    LANGUAGE_CHANGED,
    TRANSLATIONS_CLEARED,
    TRANSLATIONS_UPDATED,
    StateEvent,
    Subscription,
)
from roadguard.i18n.coordinator import LanguageCoordinator, TranslationItem
from roadguard.i18n.languages import NATIVE_NAMES, SUPPORTED_LANGUAGES, Language, is_identity

logger = logging.getLogger(__name__)


_UNSET: Any = object()


class BindingState(str, Enum):
    """Display state of one translation call site."""

    IDLE = "idle"          # Nothing resolved yet
    LOADING = "loading"    # Waiting for the backend
    RESOLVED = "resolved"  # Identity text, cache hit, or fresh translation
    FALLBACK = "fallback"  # Backend failed; showing fallback or source text


# =============================================================================
# Single translation
# =============================================================================


class TranslationBinding:
    """
    Reactive translation for one (key, text) pair.

    Every resolution gets a generation number; a result that arrives after
    a newer resolution has started is discarded.
    """

    def __init__(
        self,
        coordinator: LanguageCoordinator,
        key: str,
        text: str,
        fallback: str | None = None,
        on_change: Callable[[TranslationBinding], None] | None = None,
    ):
        self.coordinator = coordinator
        self.key = key
        self.text = text
        self.fallback = fallback
        self.on_change = on_change

        self.t = text
        self.state = BindingState.IDLE

        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._subscriptions: list[Subscription] = []
        self._closed = False

        self._subscribe()
        self._resolve()

    # -------------------------------------------------------------------------
    # Exposed state
    # -------------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.coordinator.is_loading

    @property
    def error(self) -> str | None:
        return self.coordinator.error

    @property
    def current_language(self) -> Language:
        return self.coordinator.current_language

    @property
    def generation(self) -> int:
        return self._generation

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def update(
        self,
        key: str | None = None,
        text: str | None = None,
        fallback: str | None = _UNSET,
    ) -> None:
        """Change inputs; re-resolves only if something actually changed."""
        new_key = self.key if key is None else key
        new_text = self.text if text is None else text
        new_fallback = self.fallback if fallback is _UNSET else fallback

        if (new_key, new_text, new_fallback) == (self.key, self.text, self.fallback):
            return

        key_changed = new_key != self.key
        self.key, self.text, self.fallback = new_key, new_text, new_fallback

        if key_changed:
            self._unsubscribe()
            self._subscribe()
        self._resolve()

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _subscribe(self) -> None:
        bus = self.coordinator.events
        self._subscriptions = [
            bus.subscribe(LANGUAGE_CHANGED, self._on_event),
            bus.subscribe(TRANSLATIONS_CLEARED, self._on_event),
            bus.subscribe(
                TRANSLATIONS_UPDATED,
                self._on_event,
                filter={"payload.keys": self.key},
            ),
        ]

    def _unsubscribe(self) -> None:
        for subscription in self._subscriptions:
            self.coordinator.events.unsubscribe(subscription)
        self._subscriptions = []

    async def _on_event(self, event: StateEvent) -> None:
        self._resolve()

    def _resolve(self) -> None:
        if self._closed:
            return

        self._generation += 1
        generation = self._generation
        language = self.coordinator.current_language

        if is_identity(language) or not self.text.strip():
            self._apply(self.text, BindingState.RESOLVED)
            return

        cached = self.coordinator.get_cached(self.key, language)
        if cached:
            self._apply(cached, BindingState.RESOLVED)
            return

        self.state = BindingState.LOADING
        self._task = asyncio.get_running_loop().create_task(
            self._fetch(generation, language, self.key, self.text, self.fallback)
        )

    async def _fetch(
        self,
        generation: int,
        language: Language,
        key: str,
        text: str,
        fallback: str | None,
    ) -> None:
        result = await self.coordinator.translate(key, text, fallback)

        if generation != self._generation or self._closed:
            logger.debug(f"Discarding stale translation for {key!r} (generation {generation})")
            return

        if self.coordinator.get_cached(key, language) == result:
            self._apply(result, BindingState.RESOLVED)
        else:
            self._apply(result, BindingState.FALLBACK)

    def _apply(self, text: str, state: BindingState) -> None:
        changed = text != self.t or state != self.state
        self.t = text
        self.state = state
        if changed and self.on_change is not None:
            self.on_change(self)

    async def settled(self) -> None:
        """Wait until no resolution is pending."""
        while self._task is not None and not self._task.done():
            await asyncio.wait([self._task])

    def close(self) -> None:
        """Detach from the coordinator; pending results are discarded."""
        self._closed = True
        self._generation += 1
        self._unsubscribe()

    def __repr__(self) -> str:
        return f"<TranslationBinding(key={self.key!r}, state={self.state.value})>"


def use_translation(
    coordinator: LanguageCoordinator,
    key: str,
    text: str,
    fallback: str | None = None,
    on_change: Callable[[TranslationBinding], None] | None = None,
) -> TranslationBinding:
    """Bind one UI string to the coordinator."""
    return TranslationBinding(coordinator, key, text, fallback, on_change)


# =============================================================================
# Batch prefetch
# =============================================================================


class BatchTranslationBinding:
    """
    Cache warmer for a group of UI strings.

    Fires one ``translate_batch`` whenever the item list (by identity) or the
    language changes, so individual bindings for the same keys become cache
    hits. It exposes no text itself.
    """

    def __init__(
        self,
        coordinator: LanguageCoordinator,
        items: Sequence[TranslationItem | Mapping[str, str]],
    ):
        self.coordinator = coordinator
        self.items = items
        self._task: asyncio.Task[None] | None = None
        self._subscription = coordinator.events.subscribe(LANGUAGE_CHANGED, self._on_language)
        self._fire()

    @property
    def is_loading(self) -> bool:
        return self.coordinator.is_loading

    @property
    def error(self) -> str | None:
        return self.coordinator.error

    @property
    def current_language(self) -> Language:
        return self.coordinator.current_language

    def update(self, items: Sequence[TranslationItem | Mapping[str, str]]) -> None:
        if items is self.items:
            return
        self.items = items
        self._fire()

    async def _on_language(self, event: StateEvent) -> None:
        self._fire()

    def _fire(self) -> None:
        if is_identity(self.coordinator.current_language):
            return
        self._task = asyncio.get_running_loop().create_task(
            self.coordinator.translate_batch(list(self.items))
        )

    async def settled(self) -> None:
        while self._task is not None and not self._task.done():
            await asyncio.wait([self._task])

    def close(self) -> None:
        self.coordinator.events.unsubscribe(self._subscription)


def use_batch_translation(
    coordinator: LanguageCoordinator,
    items: Sequence[TranslationItem | Mapping[str, str]],
) -> BatchTranslationBinding:
    """Prefetch translations for a group of UI strings."""
    return BatchTranslationBinding(coordinator, items)


# =============================================================================
# Language controls
# =============================================================================


class LanguageControls:
    """Language switcher actions. Performs no translation itself."""

    def __init__(self, coordinator: LanguageCoordinator):
        self.coordinator = coordinator

    @property
    def current_language(self) -> Language:
        return self.coordinator.current_language

    @property
    def available_languages(self) -> list[tuple[Language, str]]:
        """(language, native name) pairs for a switcher."""
        return [(lang, NATIVE_NAMES.get(lang.value, lang.value)) for lang in SUPPORTED_LANGUAGES]

    async def change_language(self, language: str | Language) -> None:
        await self.coordinator.set_language(language)

    async def clear_translations(self) -> None:
        await self.coordinator.clear_translations()


def use_language(coordinator: LanguageCoordinator) -> LanguageControls:
    return LanguageControls(coordinator)
