"""
Runtime settings for the translation layer.

Every field can be overridden by an environment variable of the same name
(case-insensitive) or by an entry in `.env`.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Translation layer settings."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # ==========================================================================
    # Languages
    # ==========================================================================

    default_language: str = "en"

    # ==========================================================================
    # Translation Backend
    # ==========================================================================

    # Which engine to use: "libretranslate" or "llm"
    translation_provider: str = "libretranslate"

    translation_api_url: str = "https://libretranslate.de/translate"
    translation_api_key: str = ""
    translation_timeout: float = 10.0
    retry_attempts: int = 3

    # Sliding window rate limit for outgoing requests
    rate_limit_max_requests: int = 5
    rate_limit_window_ms: int = 1000

    # Batch requests are split into small concurrent chunks
    batch_chunk_size: int = 3
    batch_chunk_delay_ms: int = 200

    # ==========================================================================
    # AI / LLM (only for translation_provider="llm")
    # ==========================================================================

    # Gemini reads GOOGLE_API_KEY, falling back to GEMINI_API_KEY
    google_api_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    openai_api_key: str = ""
    openai_model: str = "gpt-4-turbo"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-opus-20240229"

    llm_provider: str = "gemini"

    # ==========================================================================
    # Persistence
    # ==========================================================================

    # "file" or "memory"
    state_backend: str = "file"
    state_dir: str = "./data/state"

    # ==========================================================================
    # Error Reporting
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def rate_limit_window(self) -> float:
        """Rate limit window in seconds."""
        return self.rate_limit_window_ms / 1000

    @property
    def batch_chunk_delay(self) -> float:
        """Pause between batch chunks in seconds."""
        return self.batch_chunk_delay_ms / 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Set up root logging from settings."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
