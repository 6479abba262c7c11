"""
Internationalization - cached, coordinated UI translation.

Design:
1. English is the source text; everything else is looked up by key
2. Cache translations by (key, language), persisted across restarts
3. Batch translate to warm the cache
4. Never break the UI: failures fall back to source text

Usage:
    from roadguard.i18n import LanguageCoordinator, use_translation

    coordinator = LanguageCoordinator(backend, storage)
    await coordinator.set_language("hi")

    binding = use_translation(coordinator, "signup.title", "Create your account")
    await binding.settled()
    print(binding.t)
"""

from roadguard.i18n.cache import TranslationCache
from roadguard.i18n.coordinator import (
    LanguageCoordinator,
    CoordinatorState,
    TranslationItem,
)
from roadguard.i18n.errors import (
    TranslationError,
    NetworkFailure,
    BackendError,
    EmptyResult,
    StateSchemaError,
)
from roadguard.i18n.hooks import (
    BindingState,
    TranslationBinding,
    BatchTranslationBinding,
    LanguageControls,
    use_translation,
    use_batch_translation,
    use_language,
)
from roadguard.i18n.languages import (
    Language,
    IDENTITY_LANGUAGE,
    SUPPORTED_LANGUAGES,
    WARM_UP_LANGUAGES,
    RTL_LANGUAGES,
    get_language_name,
    is_identity,
    is_rtl,
)
from roadguard.i18n.persistence import (
    PersistedLanguageState,
    SCHEMA_VERSION,
    STATE_KEY,
)
from roadguard.i18n.provider import (
    TranslationProvider,
    create_coordinator,
    bootstrap,
)
from roadguard.i18n.warmup import (
    warm_translation_cache,
    load_ui_strings,
)

__all__ = [
    # Coordinator
    "LanguageCoordinator",
    "CoordinatorState",
    "TranslationItem",
    "TranslationCache",
    # Bindings
    "BindingState",
    "TranslationBinding",
    "BatchTranslationBinding",
    "LanguageControls",
    "use_translation",
    "use_batch_translation",
    "use_language",
    # Bootstrap
    "TranslationProvider",
    "create_coordinator",
    "bootstrap",
    # Persistence
    "PersistedLanguageState",
    "SCHEMA_VERSION",
    "STATE_KEY",
    # Errors
    "TranslationError",
    "NetworkFailure",
    "BackendError",
    "EmptyResult",
    "StateSchemaError",
    # Cache warming
    "warm_translation_cache",
    "load_ui_strings",
    # Language utilities
    "Language",
    "IDENTITY_LANGUAGE",
    "SUPPORTED_LANGUAGES",
    "WARM_UP_LANGUAGES",
    "RTL_LANGUAGES",
    "get_language_name",
    "is_identity",
    "is_rtl",
]
