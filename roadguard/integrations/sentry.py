"""
Sentry reporting for translation failures.

Nothing is sent unless ``SENTRY_DSN`` is configured and ``init_sentry()``
has run (``bootstrap()`` calls it). Until then failures are only logged.
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

from roadguard.config import Settings, get_settings

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings | None = None) -> bool:
    """
    Start the Sentry client.

    Returns True if reporting is on, False when no DSN is configured.
    """
    settings = settings or get_settings()

    if not settings.sentry_dsn:
        logger.info("SENTRY_DSN not set, translation errors are only logged")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        # Breadcrumbs from INFO, events only for ERROR records
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        # Source strings are user-facing text and may contain user data
        send_default_pii=False,
        before_send=_drop_expected,
    )
    sentry_sdk.set_tag("translation_provider", settings.translation_provider)

    logger.info(f"Sentry reporting enabled ({settings.environment})")
    return True


def _drop_expected(event: dict, hint: dict) -> dict | None:
    # Imported here: roadguard.i18n imports this module
    from roadguard.i18n.errors import EmptyResult

    # An empty backend answer just shows the source text; not worth an alert
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], EmptyResult):
        return None
    return event


def capture_exception(error: BaseException, **context: Any) -> str | None:
    """
    Report a translation failure with call context (language, item count...).

    Returns the Sentry event id, or None when reporting is off.
    """
    if not sentry_sdk.get_client().is_active():
        logger.debug(f"Not reporting {type(error).__name__}: Sentry inactive")
        return None

    with sentry_sdk.new_scope() as scope:
        scope.set_tag("component", "translation")
        if "language" in context:
            scope.set_tag("language", context["language"])
        scope.set_context("translation", context)
        return sentry_sdk.capture_exception(error)
