"""
Translation error taxonomy.

None of these ever reach UI code: the coordinator converts them into a
recorded error string plus a fallback value.
"""

from __future__ import annotations


class TranslationError(Exception):
    """Base class for translation failures."""
    pass


class NetworkFailure(TranslationError):
    """The translation backend could not be reached."""
    pass


class BackendError(TranslationError):
    """The translation backend answered with a non-success response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResult(TranslationError):
    """The backend returned an empty or missing string."""
    pass


class StateSchemaError(Exception):
    """Raised when a persisted language record cannot be read or migrated."""
    pass
