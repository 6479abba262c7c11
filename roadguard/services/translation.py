"""
Translation backend used by the language coordinator.

Wraps a TranslationEngine with:
1. A text-keyed cache persisted across sessions
2. A curated phrasebook consulted before the engine
3. De-duplication of identical in-flight requests
4. Rate limiting and chunked batch translation
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from roadguard.config import Settings, get_settings
from roadguard.i18n.errors import TranslationError
from roadguard.services.base import TranslationBackend, TranslationEngine
from roadguard.services.rate_limit import RateLimiter
from roadguard.storage.base import Records, StateStorage

logger = logging.getLogger(__name__)


DEFAULT_PHRASEBOOK = Path(__file__).parent.parent / "data" / "phrasebook.yaml"

# language code -> source text -> translation
Phrasebook = dict[str, dict[str, str]]


def load_phrasebook(path: Path | str | None = None) -> Phrasebook:
    """Load curated translations from YAML."""
    path = Path(path) if path else DEFAULT_PHRASEBOOK
    if not path.exists():
        logger.warning(f"Phrasebook not found: {path}")
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    phrasebook: Phrasebook = {}
    for lang, phrases in data.items():
        if isinstance(phrases, dict):
            phrasebook[str(lang)] = {str(k): str(v) for k, v in phrases.items() if v}
    return phrasebook


@dataclass
class CacheStats:
    size: int
    pending_requests: int


class TranslationService(TranslationBackend):
    """
    Caching, rate-limited translation backend.

    Usage:
        service = TranslationService(LibreTranslateEngine(), storage)
        await service.load_cached_translations()

        hi = await service.translate("Get Help", "hi")
        texts = await service.translate_batch(["Towing", "Fuel Delivery"], "hi")
    """

    def __init__(
        self,
        engine: TranslationEngine,
        storage: StateStorage | None = None,
        rate_limiter: RateLimiter | None = None,
        phrasebook: Phrasebook | None = None,
        chunk_size: int = 3,
        chunk_delay: float = 0.2,
    ):
        self.engine = engine
        self._storage = storage
        self.rate_limiter = rate_limiter or RateLimiter()
        self.phrasebook = phrasebook if phrasebook is not None else load_phrasebook()
        self.chunk_size = max(1, chunk_size)
        self.chunk_delay = chunk_delay

        self._cache: dict[str, str] = {}
        self._pending: dict[str, asyncio.Task[str]] = {}
        self._initialized = False

    # =========================================================================
    # Cache
    # =========================================================================

    @staticmethod
    def _cache_key(text: str, target_language: str) -> str:
        return f"{text.lower().strip()}_{target_language}"

    async def load_cached_translations(self) -> None:
        """Load persisted translations once; later calls do nothing."""
        if self._initialized:
            return

        if self._storage is not None:
            try:
                stored = await self._storage.load(Records.BACKEND_TRANSLATIONS) or {}
            except OSError as e:
                logger.warning(f"Failed to load cached translations: {e}")
                return
            for key, value in stored.items():
                if isinstance(value, str):
                    self._cache[key] = value

        self._initialized = True
        logger.info(f"Loaded {len(self._cache)} cached translations")

    async def _set_cache(self, text: str, target_language: str, translation: str) -> None:
        self._cache[self._cache_key(text, target_language)] = translation

        if self._storage is not None:
            try:
                await self._storage.save(Records.BACKEND_TRANSLATIONS, dict(self._cache))
            except OSError as e:
                logger.warning(f"Failed to persist translation: {e}")

    async def clear_cache(self) -> None:
        self._cache.clear()
        self._pending.clear()
        if self._storage is not None:
            await self._storage.delete(Records.BACKEND_TRANSLATIONS)
        logger.info("Translation cache cleared")

    def get_cache_stats(self) -> CacheStats:
        return CacheStats(size=len(self._cache), pending_requests=len(self._pending))

    # =========================================================================
    # Translation
    # =========================================================================

    async def translate(self, text: str, target_language: str) -> str:
        """
        Translate with caching and de-duplication.

        Raises:
            TranslationError: if the engine fails
        """
        if not text or not text.strip():
            return text

        cache_key = self._cache_key(text, target_language)

        cached = self._cache.get(cache_key)
        if cached:
            logger.debug(f"Using cached translation: {text!r} -> {cached!r}")
            return cached

        phrase = self.phrasebook.get(target_language, {}).get(text)
        if phrase:
            logger.debug(f"Using phrasebook translation: {text!r} -> {phrase!r}")
            await self._set_cache(text, target_language, phrase)
            return phrase

        task = self._pending.get(cache_key)
        if task is None:
            task = asyncio.create_task(self._translate_uncached(text, target_language, cache_key))
            self._pending[cache_key] = task
        else:
            logger.debug(f"Waiting for pending translation: {text!r}")

        # Shield: one cancelled caller must not cancel the shared request
        return await asyncio.shield(task)

    async def _translate_uncached(self, text: str, target_language: str, cache_key: str) -> str:
        try:
            await self.rate_limiter.acquire()
            translation = await self.engine.translate(text, target_language)
            await self._set_cache(text, target_language, translation)
            return translation
        finally:
            if self._pending.get(cache_key) is asyncio.current_task():
                del self._pending[cache_key]

    async def _translate_or_original(self, text: str, target_language: str, position: int) -> str:
        try:
            return await self.translate(text, target_language)
        except TranslationError as e:
            logger.error(f"Failed to translate text {position + 1}: {text!r}: {e}")
            return text

    async def translate_batch(self, texts: list[str], target_language: str) -> list[str]:
        """
        Translate texts in small concurrent chunks.

        Individual failures fall back to the original text, so the result
        always has the same length and order as ``texts``.
        """
        logger.info(f"Starting batch translation of {len(texts)} texts to {target_language}")

        results: list[str] = []
        for start in range(0, len(texts), self.chunk_size):
            chunk = texts[start:start + self.chunk_size]
            translated = await asyncio.gather(*[
                self._translate_or_original(text, target_language, start + i)
                for i, text in enumerate(chunk)
            ])
            results.extend(translated)

            if start + self.chunk_size < len(texts) and self.chunk_delay > 0:
                await asyncio.sleep(self.chunk_delay)

        logger.info(f"Batch translation completed: {len(results)} texts")
        return results

    async def close(self) -> None:
        await self.engine.close()


def create_translation_service(
    settings: Settings | None = None,
    storage: StateStorage | None = None,
) -> TranslationService:
    """Build the backend configured in settings."""
    from roadguard.services.engines import create_engine

    settings = settings or get_settings()
    return TranslationService(
        engine=create_engine(settings),
        storage=storage,
        rate_limiter=RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window=settings.rate_limit_window,
        ),
        chunk_size=settings.batch_chunk_size,
        chunk_delay=settings.batch_chunk_delay,
    )
