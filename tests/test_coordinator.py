"""
Tests for the language coordinator.

Core principle: translation failures never reach the UI.
"""

import asyncio

import pytest

from conftest import FakeBackend
from roadguard.core.events import LANGUAGE_CHANGED, STATUS_CHANGED, TRANSLATIONS_UPDATED
from roadguard.i18n.coordinator import LanguageCoordinator, TranslationItem
from roadguard.i18n.errors import BackendError, NetworkFailure
from roadguard.i18n.languages import Language
from roadguard.i18n.persistence import STATE_KEY
from roadguard.storage.local import InMemoryStateStorage


class GatedBackend(FakeBackend):
    """Each source text waits for its own release."""

    def __init__(self):
        super().__init__()
        self.gates: dict[str, asyncio.Event] = {}

    def release(self, text: str) -> None:
        self.gates.setdefault(text, asyncio.Event()).set()

    async def translate(self, text: str, target_language: str) -> str:
        self.translate_calls.append((text, target_language))
        await self.gates.setdefault(text, asyncio.Event()).wait()
        return f"{target_language}:{text}"


class BrokenSaveStorage(InMemoryStateStorage):
    """Storage whose writes fail with a non-I/O error."""

    async def save(self, name, data):
        raise RuntimeError("serializer bug")


def record_status(coordinator):
    """Collect is_loading values from status events."""
    seen = []

    async def handler(event):
        seen.append(event.payload["is_loading"])

    coordinator.events.subscribe(STATUS_CHANGED, handler)
    return seen


# =============================================================================
# Identity Language
# =============================================================================


class TestIdentityLanguage:
    @pytest.mark.asyncio
    async def test_returns_source_text(self, coordinator, backend):
        result = await coordinator.translate("signup.title", "Create your account")

        assert result == "Create your account"
        assert backend.translate_calls == []
        assert coordinator.translations == {}

    @pytest.mark.asyncio
    async def test_ignores_cache_and_fallback(self, backend, storage):
        coordinator = LanguageCoordinator(backend, storage)
        await coordinator.set_language("hi")
        await coordinator.translate("k", "Towing")
        await coordinator.set_language("en")

        assert await coordinator.translate("k", "Towing", fallback="x") == "Towing"
        assert len(backend.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_batch_is_noop(self, coordinator, backend):
        await coordinator.translate_batch([TranslationItem("a", "A")])

        assert backend.batch_calls == []
        assert coordinator.translations == {}
        assert not coordinator.is_loading


# =============================================================================
# Single Translation
# =============================================================================


class TestTranslate:
    @pytest.mark.asyncio
    async def test_cache_miss_calls_backend_and_caches(self, hindi_coordinator, backend):
        backend.responses["Create your account"] = "अपना खाता बनाएं"

        result = await hindi_coordinator.translate("signup.title", "Create your account")

        assert result == "अपना खाता बनाएं"
        assert backend.translate_calls == [("Create your account", "hi")]
        assert hindi_coordinator.get_cached("signup.title") == "अपना खाता बनाएं"

    @pytest.mark.asyncio
    async def test_cache_hit_skips_backend(self, hindi_coordinator, backend):
        await hindi_coordinator.translate("k", "Towing")
        await hindi_coordinator.translate("k", "Towing")
        await hindi_coordinator.translate("k", "Towing")

        assert len(backend.translate_calls) == 1

    @pytest.mark.asyncio
    async def test_failure_returns_source_text(self, hindi_coordinator, backend):
        backend.fail_with = NetworkFailure("Network error")

        result = await hindi_coordinator.translate("k", "Towing")

        assert result == "Towing"
        assert hindi_coordinator.error == "Network error"
        assert hindi_coordinator.get_cached("k") is None

    @pytest.mark.asyncio
    async def test_failure_prefers_fallback(self, hindi_coordinator, backend):
        backend.fail_with = BackendError("Translation service temporarily unavailable.", 503)

        result = await hindi_coordinator.translate("k", "Towing", fallback="टोइंग")

        assert result == "टोइंग"
        assert "unavailable" in hindi_coordinator.error

    @pytest.mark.asyncio
    async def test_empty_result_is_failure(self, hindi_coordinator, backend):
        backend.responses["Towing"] = ""

        result = await hindi_coordinator.translate("k", "Towing")

        assert result == "Towing"
        assert hindi_coordinator.error is not None
        assert hindi_coordinator.get_cached("k") is None

    @pytest.mark.asyncio
    async def test_error_without_message_gets_default(self, hindi_coordinator, backend):
        backend.fail_with = RuntimeError()

        await hindi_coordinator.translate("k", "Towing")

        assert hindi_coordinator.error == "Translation failed"

    @pytest.mark.asyncio
    async def test_language_switch_mid_flight_writes_captured_language(self, backend, storage):
        coordinator = LanguageCoordinator(backend, storage, initial_language="hi")
        backend.gate = asyncio.Event()

        pending = asyncio.create_task(coordinator.translate("k", "Towing"))
        await asyncio.sleep(0)
        await coordinator.set_language("ta")
        backend.gate.set()
        result = await pending

        assert result == "hi:Towing"
        assert coordinator.get_cached("k", "hi") == "hi:Towing"
        assert coordinator.get_cached("k", "ta") is None

    @pytest.mark.asyncio
    async def test_publishes_update_for_key(self, hindi_coordinator):
        events = []

        async def handler(event):
            events.append(event.payload)

        hindi_coordinator.events.subscribe(TRANSLATIONS_UPDATED, handler)
        await hindi_coordinator.translate("k", "Towing")

        assert events == [{"keys": ["k"], "language": "hi"}]

    @pytest.mark.asyncio
    async def test_blank_text_is_not_translated(self, hindi_coordinator, backend):
        loading = record_status(hindi_coordinator)

        assert await hindi_coordinator.translate("k", "") == ""
        assert await hindi_coordinator.translate("k", "   ") == "   "

        assert backend.translate_calls == []
        assert hindi_coordinator.error is None
        assert loading == []

    @pytest.mark.asyncio
    async def test_storage_failure_keeps_translation(self, backend):
        coordinator = LanguageCoordinator(
            backend, BrokenSaveStorage(), initial_language="hi"
        )

        result = await coordinator.translate("k", "Towing", fallback="fallback")

        assert result == "hi:Towing"
        assert coordinator.get_cached("k") == "hi:Towing"
        assert coordinator.error is None

    @pytest.mark.asyncio
    async def test_failing_listener_keeps_translation(self, hindi_coordinator):
        async def broken(event):
            raise RuntimeError("listener bug")

        hindi_coordinator.events.subscribe(TRANSLATIONS_UPDATED, broken)

        assert await hindi_coordinator.translate("k", "Towing") == "hi:Towing"
        assert hindi_coordinator.error is None


# =============================================================================
# Loading Status
# =============================================================================


class TestLoadingStatus:
    @pytest.mark.asyncio
    async def test_isolated_call_toggles_once(self, hindi_coordinator):
        seen = record_status(hindi_coordinator)

        assert not hindi_coordinator.is_loading
        await hindi_coordinator.translate("k", "Towing")

        assert seen == [True, False]
        assert not hindi_coordinator.is_loading

    @pytest.mark.asyncio
    async def test_loading_until_last_call_settles(self, storage):
        """One call finishing must not clear loading while siblings run."""
        backend = GatedBackend()
        coordinator = LanguageCoordinator(backend, storage, initial_language="hi")
        seen = record_status(coordinator)

        first = asyncio.create_task(coordinator.translate("a", "A"))
        second = asyncio.create_task(coordinator.translate("b", "B"))
        await asyncio.sleep(0)
        assert coordinator.in_flight == 2

        backend.release("A")
        await first
        assert coordinator.is_loading
        assert not second.done()

        backend.release("B")
        await second
        assert coordinator.in_flight == 0
        assert not coordinator.is_loading
        assert seen == [True, False]

    @pytest.mark.asyncio
    async def test_counter_survives_failure(self, hindi_coordinator, backend):
        backend.fail_with = NetworkFailure("down")
        seen = record_status(hindi_coordinator)

        await hindi_coordinator.translate("k", "Towing")

        assert hindi_coordinator.in_flight == 0
        assert seen == [True, False]

    @pytest.mark.asyncio
    async def test_mixed_single_and_batch(self, hindi_coordinator, backend):
        backend.gate = asyncio.Event()

        single = asyncio.create_task(hindi_coordinator.translate("a", "A"))
        batch = asyncio.create_task(
            hindi_coordinator.translate_batch([TranslationItem("b", "B")])
        )
        await asyncio.sleep(0)
        assert hindi_coordinator.in_flight == 2

        backend.gate.set()
        await asyncio.gather(single, batch)
        assert not hindi_coordinator.is_loading


# =============================================================================
# Batch Translation
# =============================================================================


class TestTranslateBatch:
    @pytest.mark.asyncio
    async def test_positional_merge(self, hindi_coordinator, backend):
        backend.batch_response = ["X", "Y"]

        await hindi_coordinator.translate_batch([
            TranslationItem("k1", "A"),
            TranslationItem("k2", "B"),
        ])

        assert backend.batch_calls == [(["A", "B"], "hi")]
        assert hindi_coordinator.get_cached("k1", "hi") == "X"
        assert hindi_coordinator.get_cached("k2", "hi") == "Y"

    @pytest.mark.asyncio
    async def test_missing_slot_falls_back_to_source(self, hindi_coordinator, backend):
        backend.batch_response = ["X", None]

        await hindi_coordinator.translate_batch([
            {"key": "k1", "text": "A"},
            {"key": "k2", "text": "B"},
        ])

        assert hindi_coordinator.get_cached("k1", "hi") == "X"
        assert hindi_coordinator.get_cached("k2", "hi") == "B"

    @pytest.mark.asyncio
    async def test_failure_leaves_cache_untouched(self, hindi_coordinator, backend):
        await hindi_coordinator.translate("existing", "Towing")
        before = hindi_coordinator.translations
        backend.fail_with = NetworkFailure("Network error")

        await hindi_coordinator.translate_batch([
            TranslationItem("k1", "A"),
            TranslationItem("k2", "B"),
        ])

        assert hindi_coordinator.translations == before
        assert hindi_coordinator.error == "Network error"
        assert not hindi_coordinator.is_loading

    @pytest.mark.asyncio
    async def test_length_mismatch_merges_nothing(self, hindi_coordinator, backend):
        backend.batch_response = ["X"]

        await hindi_coordinator.translate_batch([
            TranslationItem("k1", "A"),
            TranslationItem("k2", "B"),
        ])

        assert hindi_coordinator.translations == {}
        assert "1 results for 2 texts" in hindi_coordinator.error

    @pytest.mark.asyncio
    async def test_invalid_slot_merges_nothing(self, hindi_coordinator, backend):
        backend.batch_response = ["X", 42]

        await hindi_coordinator.translate_batch([
            TranslationItem("k1", "A"),
            TranslationItem("k2", "B"),
        ])

        assert hindi_coordinator.translations == {}
        assert hindi_coordinator.error is not None

    @pytest.mark.asyncio
    async def test_batch_warms_single_lookups(self, hindi_coordinator, backend):
        await hindi_coordinator.translate_batch([TranslationItem("k1", "A")])

        assert await hindi_coordinator.translate("k1", "A") == "hi:A"
        assert backend.translate_calls == []

    @pytest.mark.asyncio
    async def test_storage_failure_keeps_batch(self, backend):
        coordinator = LanguageCoordinator(
            backend, BrokenSaveStorage(), initial_language="hi"
        )

        await coordinator.translate_batch([TranslationItem("a", "A")])

        assert coordinator.get_cached("a") == "hi:A"
        assert coordinator.error is None

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self, hindi_coordinator, backend):
        await hindi_coordinator.translate_batch([])

        assert backend.batch_calls == []


# =============================================================================
# Language & Clearing
# =============================================================================


class TestSetLanguage:
    @pytest.mark.asyncio
    async def test_changes_language_and_keeps_cache(self, coordinator, backend):
        await coordinator.set_language("ta")
        await coordinator.translate("k", "Towing")
        before = coordinator.translations

        await coordinator.set_language("hi")

        assert coordinator.current_language == Language.HI
        assert coordinator.translations == before
        assert coordinator.get_cached("k", "ta") == "ta:Towing"

    @pytest.mark.asyncio
    async def test_clears_error_and_hydrates_backend(self, hindi_coordinator, backend):
        backend.fail_with = NetworkFailure("down")
        await hindi_coordinator.translate("k", "Towing")

        await hindi_coordinator.set_language("mr")

        assert hindi_coordinator.error is None
        assert backend.load_calls == 1

    @pytest.mark.asyncio
    async def test_same_language_publishes_nothing(self, hindi_coordinator, backend):
        changes = []

        async def handler(event):
            changes.append(event.payload)

        hindi_coordinator.events.subscribe(LANGUAGE_CHANGED, handler)

        await hindi_coordinator.set_language("hi")
        await hindi_coordinator.set_language(Language.HI)
        await hindi_coordinator.set_language("ta")

        assert changes == [{"language": "ta", "previous": "hi"}]
        assert backend.load_calls == 3

    @pytest.mark.asyncio
    async def test_rejects_unknown_language(self, coordinator):
        with pytest.raises(ValueError):
            await coordinator.set_language("xx")

    @pytest.mark.asyncio
    async def test_persists_language(self, coordinator, storage):
        await coordinator.set_language("hi")

        record = await storage.load(STATE_KEY)
        assert record["currentLanguage"] == "hi"
        assert record["version"] == 1


class TestClearTranslations:
    @pytest.mark.asyncio
    async def test_removes_everything_keeps_language(self, hindi_coordinator, backend):
        await hindi_coordinator.translate("a", "A")
        await hindi_coordinator.translate_batch([TranslationItem("b", "B")])

        await hindi_coordinator.clear_translations()

        assert hindi_coordinator.get_cached("a") is None
        assert hindi_coordinator.get_cached("b") is None
        assert hindi_coordinator.current_language == Language.HI
        assert backend.clear_calls == 1

    @pytest.mark.asyncio
    async def test_clears_error(self, hindi_coordinator, backend):
        backend.fail_with = NetworkFailure("down")
        await hindi_coordinator.translate("a", "A")

        await hindi_coordinator.clear_translations()

        assert hindi_coordinator.error is None


# =============================================================================
# Persistence
# =============================================================================


class TestHydrate:
    @pytest.mark.asyncio
    async def test_round_trip_through_storage(self, backend, storage):
        first = LanguageCoordinator(backend, storage, initial_language="hi")
        await first.translate("signup.title", "Create your account")

        second = LanguageCoordinator(FakeBackend(), storage)
        await second.hydrate()

        assert second.current_language == Language.HI
        assert second.get_cached("signup.title") == "hi:Create your account"

    @pytest.mark.asyncio
    async def test_legacy_record_is_migrated(self, backend, storage):
        await storage.save(STATE_KEY, {
            "currentLanguage": "hi",
            "translations": {"k": {"hi": "टोइंग", "en": "Towing"}},
        })

        coordinator = LanguageCoordinator(backend, storage)
        await coordinator.hydrate()

        assert coordinator.get_cached("k") == "टोइंग"
        assert coordinator.translations == {"k": {"hi": "टोइंग"}}

    @pytest.mark.asyncio
    async def test_future_schema_is_discarded(self, backend, storage):
        await storage.save(STATE_KEY, {
            "version": 99,
            "currentLanguage": "hi",
            "translations": {"k": {"hi": "x"}},
        })

        coordinator = LanguageCoordinator(backend, storage)
        await coordinator.hydrate()

        assert coordinator.current_language == Language.EN
        assert coordinator.translations == {}

    @pytest.mark.asyncio
    async def test_hydrate_runs_once(self, backend, storage):
        coordinator = LanguageCoordinator(backend, storage, initial_language="hi")
        await coordinator.hydrate()
        await coordinator.translate("k", "Towing")

        await storage.save(STATE_KEY, {"version": 1, "currentLanguage": "en", "translations": {}})
        await coordinator.hydrate()

        assert coordinator.get_cached("k") == "hi:Towing"

    @pytest.mark.asyncio
    async def test_restored_language_is_announced(self, backend, storage):
        await storage.save(STATE_KEY, {"version": 1, "currentLanguage": "hi", "translations": {}})
        coordinator = LanguageCoordinator(backend, storage)
        changes = []

        async def handler(event):
            changes.append(event.payload)

        coordinator.events.subscribe(LANGUAGE_CHANGED, handler)
        await coordinator.hydrate()

        assert changes == [{"language": "hi", "previous": "en"}]

    @pytest.mark.asyncio
    async def test_restored_slots_are_announced(self, backend, storage):
        await storage.save(STATE_KEY, {
            "version": 1,
            "currentLanguage": "hi",
            "translations": {"a": {"hi": "अ"}, "b": {"ta": "b"}},
        })
        coordinator = LanguageCoordinator(backend, storage, initial_language="hi")
        updates = []

        async def handler(event):
            updates.append(event.payload)

        coordinator.events.subscribe(TRANSLATIONS_UPDATED, handler)
        await coordinator.hydrate()

        assert updates == [{"keys": ["a"], "language": "hi"}]
