"""
Translation cache keyed by (translation key, language).

Slots never expire. They are only replaced by a later successful
translation or dropped by ``clear()``.
"""

from __future__ import annotations

import copy

from roadguard.i18n.languages import Language, is_identity

# translation key -> language code -> text
CacheSnapshot = dict[str, dict[str, str]]


def _code(language: str | Language) -> str:
    return language.value if isinstance(language, Language) else str(language)


class TranslationCache:
    """
    Mapping from translation key to per-language text.

    The identity language is never stored: its text is the source text.
    """

    def __init__(self, entries: CacheSnapshot | None = None):
        self._entries: CacheSnapshot = {}
        if entries:
            for key, entry in entries.items():
                for lang, text in entry.items():
                    if not is_identity(lang) and text:
                        self._entries.setdefault(key, {})[lang] = text

    def get(self, key: str, language: str | Language) -> str | None:
        """Get cached translation."""
        return self._entries.get(key, {}).get(_code(language))

    def put(self, key: str, language: str | Language, text: str) -> None:
        """Cache a translation."""
        if is_identity(language):
            raise ValueError("The identity language is never cached")
        self._entries.setdefault(key, {})[_code(language)] = text

    def merge(self, translations: dict[str, str], language: str | Language) -> None:
        """
        Write a group of translations for one language.

        The group is validated before anything is written, so either every
        slot is updated or none is.
        """
        if is_identity(language):
            raise ValueError("The identity language is never cached")
        for key, text in translations.items():
            if not isinstance(key, str) or not isinstance(text, str):
                raise TypeError(f"Invalid cache slot: {key!r} -> {text!r}")

        code = _code(language)
        for key, text in translations.items():
            self._entries.setdefault(key, {})[code] = text

    def entry(self, key: str) -> dict[str, str]:
        """All cached languages for one key (copy)."""
        return dict(self._entries.get(key, {}))

    def clear(self) -> None:
        """Drop every slot."""
        self._entries.clear()

    def snapshot(self) -> CacheSnapshot:
        """Deep copy suitable for persistence."""
        return copy.deepcopy(self._entries)

    @classmethod
    def from_snapshot(cls, snapshot: CacheSnapshot) -> TranslationCache:
        return cls(snapshot)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        """Number of cached slots across all keys and languages."""
        return sum(len(entry) for entry in self._entries.values())
