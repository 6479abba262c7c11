"""
Persisted layout of the language store.

The record is a whole-object snapshot stored under ``"language-store"``:

    {
        "version": 1,
        "currentLanguage": "hi",
        "translations": {"signup.title": {"hi": "अपना खाता बनाएं"}}
    }

Records written before versioning carry no ``"version"`` field; they are
treated as version 0 and migrated on load.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from roadguard.i18n.errors import StateSchemaError
from roadguard.i18n.languages import IDENTITY_LANGUAGE
from roadguard.storage.base import Records, StateStorage

logger = logging.getLogger(__name__)


STATE_KEY = Records.LANGUAGE_STORE
SCHEMA_VERSION = 1


class PersistedLanguageState(BaseModel):
    """The durable part of coordinator state."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = SCHEMA_VERSION
    current_language: str = Field(default=IDENTITY_LANGUAGE.value, alias="currentLanguage")
    translations: dict[str, dict[str, str]] = Field(default_factory=dict)


# =============================================================================
# Migrations
# =============================================================================


def _migrate_v0(data: dict[str, Any]) -> dict[str, Any]:
    """Unversioned record: same shape, minus identity-language slots."""
    translations = data.get("translations") or {}
    cleaned = {
        key: {
            lang: text
            for lang, text in (entry or {}).items()
            if lang != IDENTITY_LANGUAGE.value and text
        }
        for key, entry in translations.items()
    }
    return {
        "version": 1,
        "currentLanguage": data.get("currentLanguage", IDENTITY_LANGUAGE.value),
        "translations": {k: v for k, v in cleaned.items() if v},
    }


# from_version -> step producing from_version + 1
MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _migrate_v0,
}


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """
    Bring a raw record up to SCHEMA_VERSION.

    Raises:
        StateSchemaError: if the record is from a newer schema or no
            migration path exists
    """
    version = data.get("version", 0)
    if not isinstance(version, int):
        raise StateSchemaError(f"Invalid schema version: {version!r}")
    if version > SCHEMA_VERSION:
        raise StateSchemaError(
            f"State schema version {version} is newer than supported {SCHEMA_VERSION}"
        )

    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise StateSchemaError(f"No migration from schema version {version}")
        data = step(data)
        version = data["version"]

    return data


def parse_state(data: dict[str, Any]) -> PersistedLanguageState:
    """Migrate and validate a raw record."""
    migrated = migrate(data)
    try:
        return PersistedLanguageState.model_validate(migrated)
    except ValidationError as e:
        raise StateSchemaError(f"Invalid language state: {e}") from e


def dump_state(state: PersistedLanguageState) -> dict[str, Any]:
    """Serialize to the persisted (camelCase) layout."""
    return state.model_dump(by_alias=True)


async def load_state(storage: StateStorage) -> PersistedLanguageState | None:
    """
    Load the persisted language state.

    Unreadable or unmigratable records are discarded with a warning;
    the caller then starts from an empty cache.
    """
    raw = await storage.load(STATE_KEY)
    if raw is None:
        return None

    try:
        return parse_state(raw)
    except StateSchemaError as e:
        logger.warning(f"Discarding persisted language state: {e}")
        return None


async def save_state(storage: StateStorage, state: PersistedLanguageState) -> None:
    """Write the whole snapshot."""
    await storage.save(STATE_KEY, dump_state(state))
