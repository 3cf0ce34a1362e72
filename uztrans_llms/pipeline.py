"""
Translation orchestrator for UzTrans-LLMs.

This module coordinates one user-triggered translation:
1. Validate the input and the credential
2. Build the request (prompt builder)
3. Await the translator (the only suspension point)
4. On success, append a record to the history store
5. Expose the outcome as a state, then return to READY after a delay

States move READY -> TRANSLATING -> SUCCESS | ERROR -> READY. A missing
credential goes straight from READY to ERROR, and blank input never
leaves READY. At most one translation is in flight: a second submit while
TRANSLATING is rejected.

Design Philosophy:
- One explicit status value instead of independent flags
- State changes are pushed to listeners for CLI/GUI integration
- Errors end here; none of them stop the process
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from uztrans_llms.config import AppSettings
from uztrans_llms.errors import (
    HistoryWriteError,
    InputInvalidError,
    MissingCredentialError,
    ServiceFailureError,
    TranslationError,
    TranslationInProgressError,
)
from uztrans_llms.history import HistoryStore
from uztrans_llms.models import TargetLanguage, Tone, TranslationRecord
from uztrans_llms.storage import KeyValueStorage
from uztrans_llms.translate.base import Translator, create_translator
from uztrans_llms.translate.prompting import build_request

logger = logging.getLogger(__name__)


class AppStatus(str, Enum):
    READY = "READY"
    TRANSLATING = "TRANSLATING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


@dataclass(frozen=True)
class OrchestratorState:
    """Snapshot exposed to the presentation layer.

    Attributes:
        status: Current state of the machine
        translated_text: Result of the last translation, kept on ERROR when
            only storing it failed
        record: History record created by that translation
        error: Error behind an ERROR state, or a rejected input
        message: User-facing text for ``error``
    """
    status: AppStatus = AppStatus.READY
    translated_text: str = ""
    record: Optional[TranslationRecord] = None
    error: Optional[TranslationError] = None
    message: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self.status is AppStatus.TRANSLATING


# Type alias for state listeners
StateListener = Callable[[OrchestratorState], None]


class TranslationOrchestrator:
    """Runs prompt builder -> translator -> history store for each submit.

    Usage:
        orchestrator = TranslationOrchestrator(translator, history, settings)
        state = await orchestrator.submit("Salom")
        print(state.translated_text)
    """

    def __init__(
        self,
        translator: Translator,
        history: HistoryStore,
        settings: AppSettings | None = None,
    ):
        self.translator = translator
        self.history = history
        self.settings = settings or AppSettings()
        self._state = OrchestratorState()
        self._listeners: list[StateListener] = []
        self._reset_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        storage: KeyValueStorage,
        translator: Translator | None = None,
    ) -> TranslationOrchestrator:
        """Build the translator and history from settings and load the history."""
        if translator is None:
            translator = create_translator(
                settings.backend,
                model=settings.model,
                timeout=settings.timeout,
            )
        history = HistoryStore(storage)
        history.load()
        return cls(translator, history, settings)

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def status(self) -> AppStatus:
        return self._state.status

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        self._listeners.remove(listener)

    def _set_state(self, state: OrchestratorState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception(f"State listener {listener!r} failed")

    async def submit(
        self,
        text: str,
        target: TargetLanguage | str | None = None,
        tone: Tone | str | None = None,
    ) -> OrchestratorState:
        """Translate ``text`` and return the resulting state.

        Raises:
            TranslationInProgressError: another submit is still awaiting
                the translator
        """
        if self._state.status is AppStatus.TRANSLATING:
            raise TranslationInProgressError()

        self._cancel_reset()

        if not text or not text.strip():
            error = InputInvalidError("source text is empty")
            self._set_state(OrchestratorState(status=AppStatus.READY, error=error, message=error.user_message))
            return self._state

        if self.translator.requires_credential and not self.settings.has_credential:
            self._fail(MissingCredentialError(f"{self.translator.name} needs an API key"))
            return self._state

        request = build_request(
            text,
            TargetLanguage.parse(target) if target is not None else self.settings.target,
            Tone.parse(tone) if tone is not None else self.settings.tone,
            temperature=self.settings.temperature,
        )

        self._set_state(OrchestratorState(status=AppStatus.TRANSLATING))
        try:
            translated = await self.translator.translate(request, self.settings.api_key)
        except TranslationError as e:
            self._fail(e)
            return self._state
        except asyncio.CancelledError:
            self._set_state(OrchestratorState())
            raise
        except Exception as e:
            logger.exception(f"{self.translator.name} raised an unexpected error")
            self._fail(ServiceFailureError(str(e) or type(e).__name__))
            return self._state

        record = TranslationRecord.from_request(request, translated)
        try:
            self.history.append(record)
        except Exception as e:
            self._fail(HistoryWriteError(f"could not store record {record.id}: {e}"), translated)
            return self._state
        logger.info(
            f"Translated {len(request.text)} chars to {request.target.display_name} "
            f"({request.tone.value}) with {self.translator.name}"
        )
        self._set_state(OrchestratorState(status=AppStatus.SUCCESS, translated_text=translated, record=record))
        self._schedule_reset(self.settings.success_reset_delay)
        return self._state

    def _fail(self, error: TranslationError, translated_text: str = "") -> None:
        logger.warning(f"Translation failed [{error.kind.value}]: {error.detail}")
        self._set_state(
            OrchestratorState(
                status=AppStatus.ERROR,
                translated_text=translated_text,
                error=error,
                message=error.user_message,
            )
        )
        self._schedule_reset(self.settings.error_reset_delay)

    def reset(self) -> None:
        """Return to READY now, dropping any displayed result or error."""
        if self._state.status is AppStatus.TRANSLATING:
            return
        self._cancel_reset()
        if self._state != OrchestratorState():
            self._set_state(OrchestratorState())

    def _schedule_reset(self, delay: float) -> None:
        self._cancel_reset()
        self._reset_task = asyncio.get_running_loop().create_task(self._reset_later(delay))

    async def _reset_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._reset_task = None
        if self._state.status in (AppStatus.SUCCESS, AppStatus.ERROR):
            self._set_state(OrchestratorState())

    def _cancel_reset(self) -> None:
        task, self._reset_task = self._reset_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def aclose(self) -> None:
        """Cancel the pending auto-reset, if any."""
        task, self._reset_task = self._reset_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
