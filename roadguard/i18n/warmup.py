"""
Prefetch the UI string catalog into the coordinator cache.

A warmed cache means the first Hindi screen renders translated text
immediately instead of flashing English while requests are in flight.
Re-run after adding strings to ``data/ui_strings.yaml``.

    await warm_translation_cache(coordinator)                 # WARM_UP_LANGUAGES
    await warm_translation_cache(coordinator, languages=["ta"])

    roadguard-warmup --languages hi ta
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml

from roadguard.i18n.coordinator import LanguageCoordinator, TranslationItem
from roadguard.i18n.languages import (
    Language,
    WARM_UP_LANGUAGES,
    coerce_language,
    get_language_name,
    is_identity,
)

logger = logging.getLogger(__name__)


DEFAULT_CATALOG = Path(__file__).parent.parent / "data" / "ui_strings.yaml"


def load_ui_strings(path: Path | str | None = None) -> dict[str, str]:
    """Load the translation key -> source text catalog from YAML."""
    path = Path(path) if path else DEFAULT_CATALOG

    if not path.exists():
        logger.warning(f"UI string catalog not found: {path}")
        return {}

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        logger.warning(f"UI string catalog {path} is not a mapping")
        return {}

    return {str(k): str(v) for k, v in data.items() if v and str(v).strip()}


async def warm_translation_cache(
    coordinator: LanguageCoordinator,
    languages: list[str | Language] | None = None,
    catalog: dict[str, str] | None = None,
    batch_size: int = 20,
    verbose: bool = False,
) -> dict[str, Any]:
    """
    Fill the coordinator cache for each language, one batch at a time.

    Batches always target the current language, so this switches language
    per target and restores the original language when done.

    Args:
        coordinator: Coordinator whose cache to fill
        languages: Languages to warm (defaults to WARM_UP_LANGUAGES)
        catalog: Key -> text mapping (defaults to the bundled catalog)
        batch_size: Items per backend request
        verbose: Print progress to stdout

    Returns:
        Counts: languages, texts, translations (new), cached (skipped)
        and errors (failed batches)
    """
    if languages is None:
        languages = list(WARM_UP_LANGUAGES)
    if catalog is None:
        catalog = load_ui_strings()

    targets = [coerce_language(lang) for lang in languages]
    targets = [lang for lang in targets if not is_identity(lang)]

    stats = {
        "languages": len(targets),
        "texts": len(catalog),
        "translations": 0,
        "cached": 0,
        "errors": 0,
    }

    original_language = coordinator.current_language
    items = [TranslationItem(key, text) for key, text in catalog.items()]

    try:
        for lang in targets:
            if verbose:
                print(f"🌍 Warming {get_language_name(lang.value)} ({lang.value})...")

            await coordinator.set_language(lang)

            for i in range(0, len(items), batch_size):
                batch = items[i:i + batch_size]

                uncached = [item for item in batch if not coordinator.get_cached(item.key, lang)]
                stats["cached"] += len(batch) - len(uncached)
                if not uncached:
                    continue

                await coordinator.translate_batch(uncached)

                missing = [item for item in uncached if not coordinator.get_cached(item.key, lang)]
                if missing:
                    stats["errors"] += 1
                    logger.warning(f"Batch failed for {lang.value}: {coordinator.error}")
                stats["translations"] += len(uncached) - len(missing)

                if verbose:
                    progress = min(i + batch_size, len(items))
                    print(f"   {progress}/{len(items)} texts", end="\r")

            if verbose:
                print(f"   ✓ {lang.value} complete")
    finally:
        if coordinator.current_language != original_language:
            await coordinator.set_language(original_language)

    logger.info(
        f"Warm-up complete: {stats['translations']} new, {stats['cached']} cached, "
        f"{stats['errors']} failed batches"
    )
    return stats


# =============================================================================
# Command line
# =============================================================================


async def _run(languages: list[str] | None, catalog_path: str | None, verbose: bool) -> dict[str, Any]:
    from roadguard.i18n.provider import create_coordinator

    coordinator = create_coordinator()
    try:
        await coordinator.hydrate()
        return await warm_translation_cache(
            coordinator,
            languages=languages,
            catalog=load_ui_strings(catalog_path),
            verbose=verbose,
        )
    finally:
        await coordinator.backend.close()


def main():
    """Entry point for the roadguard-warmup script."""
    import argparse

    from roadguard.config import configure_logging

    parser = argparse.ArgumentParser(
        description="Prefetch UI string translations into the persisted cache"
    )
    parser.add_argument(
        "--languages", "-l",
        nargs="+",
        help="Language codes to warm (default: hi)"
    )
    parser.add_argument(
        "--catalog", "-c",
        help="Path to a YAML catalog of translation key -> text"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log, no progress output"
    )

    args = parser.parse_args()
    configure_logging()

    stats = asyncio.run(_run(args.languages, args.catalog, verbose=not args.quiet))

    if not args.quiet:
        print("\n📊 Stats:")
        print(f"   Languages warmed: {stats['languages']}")
        print(f"   Catalog texts: {stats['texts']}")
        print(f"   Already cached: {stats['cached']}")
        print(f"   New translations: {stats['translations']}")
        print(f"   Failed batches: {stats['errors']}")


if __name__ == "__main__":
    main()
