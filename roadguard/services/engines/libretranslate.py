"""
LibreTranslate HTTP engine.

Talks to a LibreTranslate-compatible ``/translate`` endpoint. Transient
network failures are retried; HTTP errors are not.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from roadguard.i18n.errors import BackendError, EmptyResult, NetworkFailure
from roadguard.services.base import TranslationEngine

logger = logging.getLogger(__name__)


DEFAULT_API_URL = "https://libretranslate.de/translate"


class LibreTranslateEngine(TranslationEngine):
    """Translate through the LibreTranslate REST API."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: str = "",
        timeout: float = 10.0,
        retry_attempts: int = 3,
        retry_wait: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait = retry_wait
        self._transport = transport

    @property
    def name(self) -> str:
        return "libretranslate"

    async def translate(self, text: str, target_language: str) -> str:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, max=self.retry_wait * 8),
            retry=retry_if_exception_type(NetworkFailure),
            reraise=True,
        ):
            with attempt:
                return await self._request(text, target_language)

        # AsyncRetrying either returns from the block or reraises
        raise NetworkFailure("Translation request was not attempted")

    async def _request(self, text: str, target_language: str) -> str:
        """Send one translation request."""
        body: dict[str, Any] = {
            "q": text,
            "source": "auto",
            "target": target_language,
            "format": "text",
        }
        if self.api_key:
            body["api_key"] = self.api_key

        logger.debug(f"Translating {text!r} to {target_language}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=body,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException as e:
            logger.warning(f"Translation request timed out: {e}")
            raise NetworkFailure("Translation request timed out.") from e
        except httpx.TransportError as e:
            logger.warning(f"Translation API unreachable: {e}")
            raise NetworkFailure(
                "Network error. Please check your internet connection."
            ) from e

        if response.status_code != 200:
            logger.error(
                f"Translation API error {response.status_code}: {response.text[:200]}"
            )
            raise _error_for_status(response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError("Translation failed: invalid JSON response", 200) from e

        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not translated:
            raise EmptyResult(f"Empty translation for {text!r}")

        logger.debug(f"Translation successful: {text!r} -> {translated!r}")
        return translated


def _error_for_status(status_code: int) -> BackendError:
    if status_code == 429:
        return BackendError(
            "Translation rate limit exceeded. Please try again later.", status_code
        )
    if status_code == 503:
        return BackendError("Translation service temporarily unavailable.", status_code)
    return BackendError(f"Translation failed: HTTP {status_code}", status_code)
