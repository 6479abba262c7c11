"""
LLM-powered translation engine using DSPy.

Supports Gemini (primary), OpenAI, and Anthropic through litellm model
prefixes.
"""

from __future__ import annotations

import asyncio
import logging

import dspy

from roadguard.config import Settings, get_settings
from roadguard.i18n.errors import BackendError, EmptyResult
from roadguard.i18n.languages import get_language_name
from roadguard.services.base import TranslationEngine

logger = logging.getLogger(__name__)


class TranslateText(dspy.Signature):
    """Translate short user-interface text, keeping it concise and natural."""

    text: str = dspy.InputField(desc="Text to translate")
    target_language: str = dspy.InputField(desc="Target language name (e.g., 'Hindi')")
    context: str = dspy.InputField(desc="Where the text appears", default="")

    translated_text: str = dspy.OutputField(desc="Translated text")


def build_lm(settings: Settings | None = None) -> dspy.LM:
    """
    Build the configured language model.

    Raises:
        ValueError: if the provider is unknown or its API key is missing
    """
    settings = settings or get_settings()
    provider = settings.llm_provider

    if provider == "gemini":
        # Accept both GOOGLE_API_KEY and GEMINI_API_KEY
        api_key = settings.google_api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY not set")
        return dspy.LM(model=f"gemini/{settings.gemini_model}", api_key=api_key)

    elif provider == "openai":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY not set")
        return dspy.LM(model=f"openai/{settings.openai_model}", api_key=settings.openai_api_key)

    elif provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")
        return dspy.LM(
            model=f"anthropic/{settings.anthropic_model}",
            api_key=settings.anthropic_api_key,
        )

    else:
        raise ValueError(f"Unknown provider: {provider}")


class LLMTranslationEngine(TranslationEngine):
    """
    Translate with a language model.

    The LM is built lazily on first use so that constructing the engine
    never needs credentials.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        lm: dspy.LM | None = None,
        context: str = "roadside assistance app UI",
    ):
        self.settings = settings or get_settings()
        self.context = context
        self._lm = lm
        self._translate_module: dspy.Predict | None = None

    @property
    def name(self) -> str:
        return f"llm:{self.settings.llm_provider}"

    @property
    def lm(self) -> dspy.LM:
        if self._lm is None:
            self._lm = build_lm(self.settings)
        return self._lm

    @property
    def translate_module(self) -> dspy.Predict:
        if self._translate_module is None:
            self._translate_module = dspy.Predict(TranslateText)
        return self._translate_module

    def _predict(self, text: str, target_language: str) -> str:
        with dspy.context(lm=self.lm):
            result = self.translate_module(
                text=text,
                target_language=get_language_name(target_language),
                context=self.context,
            )
        return (result.translated_text or "").strip()

    async def translate(self, text: str, target_language: str) -> str:
        try:
            # DSPy calls block; keep them off the event loop
            translated = await asyncio.to_thread(self._predict, text, target_language)
        except Exception as e:
            logger.error(f"LLM translation failed: {e}")
            raise BackendError(f"Translation failed: {e}") from e

        if not translated:
            raise EmptyResult(f"Empty translation for {text!r}")
        return translated
