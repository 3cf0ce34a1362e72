"""
Error taxonomy for the translation path.

Every failure between a submit and its result is one of these classes.
Each carries a ``kind`` for programmatic handling and a stable
``user_message`` that is safe to show; the underlying diagnostic (SDK
message, traceback text) stays in ``detail`` for logs.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    INPUT_INVALID = "input_invalid"
    MISSING_CREDENTIAL = "missing_credential"
    SERVICE_FAILURE = "service_failure"
    EMPTY_RESPONSE = "empty_response"
    TIMEOUT = "timeout"
    STORAGE_CORRUPT = "storage_corrupt"
    STORAGE_WRITE = "storage_write"
    IN_PROGRESS = "in_progress"


class TranslationError(Exception):
    """Base class for all translation-path errors."""

    kind: ErrorKind = ErrorKind.SERVICE_FAILURE
    user_message: str = "Translation failed."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.user_message
        super().__init__(self.detail)


class InputInvalidError(TranslationError):
    kind = ErrorKind.INPUT_INVALID
    user_message = "Please enter text to translate."


class MissingCredentialError(TranslationError):
    kind = ErrorKind.MISSING_CREDENTIAL
    user_message = (
        "API key is missing. Set it with `uztrans keys set gemini` "
        "or the GEMINI_API_KEY environment variable."
    )


class ServiceFailureError(TranslationError):
    kind = ErrorKind.SERVICE_FAILURE
    user_message = "Translation service unreachable; verify credentials."


class EmptyResponseError(TranslationError):
    kind = ErrorKind.EMPTY_RESPONSE
    user_message = "The translation service returned an empty response."


class TranslationTimeoutError(TranslationError):
    kind = ErrorKind.TIMEOUT
    user_message = "The translation service did not respond in time."


class TranslationInProgressError(TranslationError):
    kind = ErrorKind.IN_PROGRESS
    user_message = "A translation is already in progress."


class HistoryWriteError(TranslationError):
    """The translation succeeded but its record could not be stored."""
    kind = ErrorKind.STORAGE_WRITE
    user_message = "Translation finished, but it could not be saved to history."


class StorageCorruptError(TranslationError):
    """Persisted history could not be parsed. Logged, never surfaced."""
    kind = ErrorKind.STORAGE_CORRUPT
    user_message = "Stored history was unreadable and has been reset."
