"""
Language coordinator - the shared translation store.

Owns the current language, the (key, language) cache and the shared
loading/error status. UI bindings call into it; it calls the translation
backend on cache misses.

Nothing here raises to callers on translation failure: failures become a
recorded ``error`` string plus the best available fallback text.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from pydantic import BaseModel

from roadguard.core.events import (
    EventBus,
    language_changed,
    status_changed,
    translations_cleared,
    translations_updated,
)
from roadguard.i18n.cache import CacheSnapshot, TranslationCache
from roadguard.i18n.errors import BackendError, EmptyResult
from roadguard.i18n.languages import (
    IDENTITY_LANGUAGE,
    Language,
    coerce_language,
    get_language_by_code,
    is_identity,
)
from roadguard.i18n.persistence import PersistedLanguageState, load_state, save_state
from roadguard.integrations.sentry import capture_exception
from roadguard.services.base import TranslationBackend
from roadguard.storage.base import StateStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TranslationItem:
    """One piece of UI text to translate under a stable key."""

    key: str
    text: str


def _coerce_item(item: TranslationItem | Mapping[str, str]) -> TranslationItem:
    if isinstance(item, TranslationItem):
        return item
    return TranslationItem(key=item["key"], text=item["text"])


class CoordinatorState(BaseModel):
    """Point-in-time view of coordinator state."""

    current_language: Language
    translations: CacheSnapshot
    is_loading: bool
    error: str | None = None


class LanguageCoordinator:
    """
    Translation store shared by every binding in an application.

    Construct one per application (or per test) and hand it to bindings
    and the TranslationProvider.

    Usage:
        coordinator = LanguageCoordinator(backend, storage)
        await coordinator.set_language("hi")

        title = await coordinator.translate("signup.title", "Create your account")

        await coordinator.translate_batch([
            TranslationItem("footer.towing", "Towing"),
            TranslationItem("footer.fuel", "Fuel Delivery"),
        ])
    """

    def __init__(
        self,
        backend: TranslationBackend,
        storage: StateStorage | None = None,
        events: EventBus | None = None,
        initial_language: str | Language = IDENTITY_LANGUAGE,
    ):
        self.backend = backend
        self.events = events or EventBus()
        self._storage = storage
        self._current_language = coerce_language(initial_language)
        self._cache = TranslationCache()
        self._in_flight = 0
        self._error: str | None = None
        self._hydrated = False

    # =========================================================================
    # State
    # =========================================================================

    @property
    def current_language(self) -> Language:
        return self._current_language

    @property
    def in_flight(self) -> int:
        """Number of translate/translate_batch calls awaiting the backend."""
        return self._in_flight

    @property
    def is_loading(self) -> bool:
        return self._in_flight > 0

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def translations(self) -> CacheSnapshot:
        """Copy of the whole cache."""
        return self._cache.snapshot()

    @property
    def state(self) -> CoordinatorState:
        return CoordinatorState(
            current_language=self._current_language,
            translations=self._cache.snapshot(),
            is_loading=self.is_loading,
            error=self._error,
        )

    def get_cached(self, key: str, language: str | Language | None = None) -> str | None:
        """Cache peek for a key in the given (default: current) language."""
        language = language if language is not None else self._current_language
        if is_identity(language):
            return None
        return self._cache.get(key, language)

    # =========================================================================
    # Persistence
    # =========================================================================

    async def hydrate(self) -> None:
        """
        Restore language and cache from storage.

        Only the first call reads storage; later calls do nothing.
        Restored state is announced on the event bus.
        """
        if self._hydrated:
            return
        self._hydrated = True

        if self._storage is None:
            return

        state = await load_state(self._storage)
        if state is None:
            return

        previous = self._current_language
        language = get_language_by_code(state.current_language)
        if language is None:
            logger.warning(f"Unknown persisted language {state.current_language!r}, using default")
        else:
            self._current_language = language
        self._cache = TranslationCache.from_snapshot(state.translations)
        logger.info(
            f"Restored {len(self._cache)} cached translations, language={self._current_language.value}"
        )

        # Bindings created before hydration must see the restored state
        if self._current_language != previous:
            await self.events.publish(
                language_changed(self._current_language.value, previous.value)
            )
        elif not is_identity(self._current_language):
            restored = [
                key for key in state.translations
                if self._cache.get(key, self._current_language)
            ]
            if restored:
                await self.events.publish(
                    translations_updated(restored, self._current_language.value)
                )

    async def _persist(self) -> None:
        """Write the whole snapshot. Failures are logged, never raised."""
        if self._storage is None:
            return

        state = PersistedLanguageState(
            current_language=self._current_language.value,
            translations=self._cache.snapshot(),
        )
        try:
            await save_state(self._storage, state)
        except OSError as e:
            logger.warning(f"Failed to persist language state: {e}")

    async def _commit(self, keys: list[str], language: Language) -> None:
        """Persist and announce slots already written to the cache."""
        try:
            await self._persist()
            await self.events.publish(translations_updated(keys, language.value))
        except Exception:
            logger.exception(f"Failed to publish {len(keys)} cached translations")

    # =========================================================================
    # Loading status
    # =========================================================================

    async def _begin(self) -> None:
        self._in_flight += 1
        if self._in_flight == 1:
            self._error = None
            await self.events.publish(status_changed(True, self._error))

    async def _end(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        if self._in_flight == 0:
            await self.events.publish(status_changed(False, self._error))

    def _record_failure(self, error: Exception, default_message: str, **context) -> None:
        self._error = str(error) or default_message
        logger.warning(f"{default_message}: {self._error}")
        capture_exception(error, **context)

    # =========================================================================
    # Operations
    # =========================================================================

    async def set_language(self, language: str | Language) -> None:
        """
        Switch the language subsequent lookups target.

        Existing cache entries are left untouched; bindings re-resolve
        because they subscribe to ``language.changed``.
        Re-selecting the current language publishes nothing.

        Raises:
            ValueError: if the language is not supported
        """
        language = coerce_language(language)
        previous = self._current_language

        self._current_language = language
        self._error = None
        if language != previous:
            logger.info(f"Language changed to: {language.value}")

        try:
            await self.backend.load_cached_translations()
        except Exception as e:
            logger.warning(f"Failed to load cached translations: {e}")
            capture_exception(e, operation="load_cached_translations")

        await self._persist()
        if language != previous:
            await self.events.publish(language_changed(language.value, previous.value))

    async def translate(self, key: str, text: str, fallback: str | None = None) -> str:
        """
        Resolve the text for a key in the current language.

        Order: identity language, cache, backend. On backend failure the
        error is recorded and the cached value (if one appeared meanwhile),
        the fallback, or the source text is returned.
        """
        language = self._current_language

        if is_identity(language):
            return text

        # Nothing to translate
        if not text or not text.strip():
            return text

        cached = self._cache.get(key, language)
        if cached:
            return cached

        await self._begin()
        try:
            result = await self.backend.translate(text, language.value)
            if not result:
                raise EmptyResult(f"Empty translation for {key!r}")
        except Exception as e:
            self._record_failure(e, "Translation failed", key=key, language=language.value)
            return self._cache.get(key, language) or fallback or text
        else:
            # Write under the language captured at call start, not whatever
            # is current now
            self._cache.put(key, language, result)
            await self._commit([key], language)
            return result
        finally:
            await self._end()

    async def translate_batch(
        self,
        items: Sequence[TranslationItem | Mapping[str, str]],
    ) -> None:
        """
        Translate many items with one backend request and cache the results.

        Results are matched to items by position. Empty results fall back to
        the item's source text. Either the whole batch is merged into the
        cache or, on failure, none of it is.
        """
        language = self._current_language

        if is_identity(language):
            logger.debug("Identity language is current, skipping batch translation")
            return

        batch = [_coerce_item(item) for item in items]
        if not batch:
            return

        await self._begin()
        try:
            logger.info(f"Starting batch translation for {len(batch)} items")
            texts = [item.text for item in batch]
            translated = await self.backend.translate_batch(texts, language.value)

            if translated is None or len(translated) != len(batch):
                got = "none" if translated is None else len(translated)
                raise BackendError(
                    f"Batch translation returned {got} results for {len(batch)} texts"
                )

            merged = {
                item.key: translated[i] or item.text
                for i, item in enumerate(batch)
            }
            self._cache.merge(merged, language)
        except Exception as e:
            self._record_failure(
                e, "Batch translation failed", items=len(batch), language=language.value
            )
        else:
            logger.info(f"Batch translation completed, stored {len(merged)} translations")
            await self._commit(list(merged), language)
        finally:
            await self._end()

    async def clear_translations(self) -> None:
        """Empty the cache and the backend's cache; keep the language."""
        self._cache.clear()
        self._error = None

        try:
            await self.backend.clear_cache()
        except Exception as e:
            logger.warning(f"Failed to clear backend cache: {e}")
            capture_exception(e, operation="clear_cache")

        await self._persist()
        await self.events.publish(translations_cleared())

    def __repr__(self) -> str:
        return (
            f"<LanguageCoordinator(language={self._current_language.value}, "
            f"slots={len(self._cache)}, in_flight={self._in_flight})>"
        )
