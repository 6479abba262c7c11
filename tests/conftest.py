"""
Shared fixtures for translation layer tests.
"""

from __future__ import annotations

import asyncio

import pytest

from roadguard.i18n.coordinator import LanguageCoordinator
from roadguard.services.base import TranslationBackend
from roadguard.storage.local import InMemoryStateStorage


class FakeBackend(TranslationBackend):
    """
    Scriptable backend that records every call.

    ``responses`` maps source text to translation; unknown texts get a
    ``"<lang>:<text>"`` translation.
    """

    def __init__(self, responses: dict[str, str] | None = None):
        self.responses = responses or {}
        self.batch_response: list | None = None
        self.fail_with: Exception | None = None
        self.gate: asyncio.Event | None = None

        self.translate_calls: list[tuple[str, str]] = []
        self.batch_calls: list[tuple[list[str], str]] = []
        self.load_calls = 0
        self.clear_calls = 0
        self.closed = False

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def translate(self, text: str, target_language: str) -> str:
        self.translate_calls.append((text, target_language))
        await self._wait()
        return self.responses.get(text, f"{target_language}:{text}")

    async def translate_batch(self, texts: list[str], target_language: str) -> list[str]:
        self.batch_calls.append((list(texts), target_language))
        await self._wait()
        if self.batch_response is not None:
            return self.batch_response
        return [self.responses.get(t, f"{target_language}:{t}") for t in texts]

    async def load_cached_translations(self) -> None:
        self.load_calls += 1

    async def clear_cache(self) -> None:
        self.clear_calls += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def backend():
    """Fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def storage():
    """Empty in-memory storage."""
    return InMemoryStateStorage()


@pytest.fixture
def coordinator(backend, storage):
    """Coordinator starting in the identity language."""
    return LanguageCoordinator(backend, storage)


@pytest.fixture
def hindi_coordinator(backend, storage):
    """Coordinator already targeting Hindi."""
    return LanguageCoordinator(backend, storage, initial_language="hi")
