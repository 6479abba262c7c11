"""
Application bootstrap for the translation layer.

Seeds the coordinator from storage, hydrates the backend's own cache and
re-applies the persisted language so every subscriber sees it.
"""

from __future__ import annotations

import logging

from roadguard.config import Settings, get_settings
from roadguard.i18n.coordinator import LanguageCoordinator
from roadguard.integrations.sentry import init_sentry
from roadguard.storage.local import create_state_storage

logger = logging.getLogger(__name__)


class TranslationProvider:
    """
    Runs the one-time translation bootstrap.

    Usage:
        async with TranslationProvider(coordinator) as provider:
            ...  # render UI with bindings on provider.coordinator
    """

    def __init__(self, coordinator: LanguageCoordinator):
        self.coordinator = coordinator
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Bootstrap once; later calls do nothing."""
        if self._initialized:
            return

        try:
            await self.coordinator.backend.load_cached_translations()
        except Exception as e:
            logger.warning(f"Failed to load cached translations: {e}")

        await self.coordinator.hydrate()
        await self.coordinator.set_language(self.coordinator.current_language)

        self._initialized = True
        logger.info("TranslationProvider initialized")

    async def close(self) -> None:
        await self.coordinator.backend.close()

    async def __aenter__(self) -> TranslationProvider:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def create_coordinator(settings: Settings | None = None) -> LanguageCoordinator:
    """Build a coordinator wired to the configured storage and backend."""
    # Imported here: roadguard.services imports from roadguard.i18n
    from roadguard.services.translation import create_translation_service

    settings = settings or get_settings()
    storage = create_state_storage(settings)

    return LanguageCoordinator(
        backend=create_translation_service(settings, storage),
        storage=storage,
        initial_language=settings.default_language,
    )


async def bootstrap(settings: Settings | None = None) -> TranslationProvider:
    """Create and initialize a provider from settings."""
    settings = settings or get_settings()
    init_sentry(settings)

    provider = TranslationProvider(create_coordinator(settings))
    await provider.initialize()
    return provider
