"""
Translation backend contracts.

``TranslationBackend`` is what the language coordinator talks to.
``TranslationEngine`` is the thing that actually produces a translation
(an HTTP API, an LLM, ...); a backend wraps an engine with caching,
rate limiting and batching.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TranslationBackend(ABC):
    """
    Collaborator used by the language coordinator.

    Example:
        class StaticBackend(TranslationBackend):
            async def translate(self, text, target_language):
                return PHRASES[target_language].get(text, text)
            ...
    """

    @abstractmethod
    async def translate(self, text: str, target_language: str) -> str:
        """Translate one text into the target language."""
        pass

    @abstractmethod
    async def translate_batch(self, texts: list[str], target_language: str) -> list[str]:
        """
        Translate several texts.

        The result is positionally aligned with ``texts``: index i of the
        response is the translation of index i of the request.
        """
        pass

    @abstractmethod
    async def load_cached_translations(self) -> None:
        """Hydrate any backend-side cache. Must be idempotent."""
        pass

    @abstractmethod
    async def clear_cache(self) -> None:
        """Purge any backend-side cache."""
        pass

    async def close(self) -> None:
        """
        Release network resources.

        Override this if the backend holds open clients.
        """
        pass


class TranslationEngine(ABC):
    """A single source of machine translations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this engine."""
        pass

    @abstractmethod
    async def translate(self, text: str, target_language: str) -> str:
        """
        Translate text from auto-detected source to target language.

        Raises:
            TranslationError: on any failure
        """
        pass

    async def close(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
