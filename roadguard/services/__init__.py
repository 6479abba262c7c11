"""
Translation backends.

The language coordinator depends only on ``TranslationBackend``.
``TranslationService`` is the production implementation.
"""

from roadguard.services.base import TranslationBackend, TranslationEngine
from roadguard.services.rate_limit import RateLimiter
from roadguard.services.translation import (
    TranslationService,
    CacheStats,
    create_translation_service,
    load_phrasebook,
)

__all__ = [
    "TranslationBackend",
    "TranslationEngine",
    "RateLimiter",
    "TranslationService",
    "CacheStats",
    "create_translation_service",
    "load_phrasebook",
]
