"""
Translation engines.
"""

from __future__ import annotations

from roadguard.config import Settings, get_settings
from roadguard.services.base import TranslationEngine
from roadguard.services.engines.libretranslate import LibreTranslateEngine


def create_engine(settings: Settings | None = None) -> TranslationEngine:
    """Create the engine selected by ``translation_provider``."""
    settings = settings or get_settings()

    if settings.translation_provider == "libretranslate":
        return LibreTranslateEngine(
            api_url=settings.translation_api_url,
            api_key=settings.translation_api_key,
            timeout=settings.translation_timeout,
            retry_attempts=settings.retry_attempts,
        )

    if settings.translation_provider == "llm":
        # Imported here so dspy only loads when the LLM engine is used
        from roadguard.services.engines.llm import LLMTranslationEngine
        return LLMTranslationEngine(settings)

    raise ValueError(f"Unknown translation provider: {settings.translation_provider}")


__all__ = [
    "LibreTranslateEngine",
    "create_engine",
]
