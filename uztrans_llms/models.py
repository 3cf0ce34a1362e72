"""
Core data model for UzTrans-LLMs.

This module defines:
- TargetLanguage and Tone selections offered to the user
- TranslationRequest: the ephemeral payload sent to a translator
- TranslationRecord: one persisted history entry
- HistoryLog: the newest-first sequence of records

Records are immutable once created and serialize to a single canonical
schema (``{id, source, target, tone, original, translated, timestamp}``).
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


SOURCE_LANGUAGE = "UZ"


class TargetLanguage(str, Enum):
    """Languages Uzbek text can be translated into."""
    RUSSIAN = "RU"
    ENGLISH = "EN"

    @property
    def display_name(self) -> str:
        return _LANGUAGE_NAMES[self]

    @classmethod
    def parse(cls, value: str | TargetLanguage) -> TargetLanguage:
        """Accept 'RU', 'ru', 'russian', 'UZ_RU' and similar spellings."""
        if isinstance(value, TargetLanguage):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown target language: {value!r}")
        key = value.strip().upper()
        if key.startswith("UZ_"):
            key = key[3:]
        for member in cls:
            if key in (member.value, member.name):
                return member
        raise ValueError(f"Unknown target language: {value}")


_LANGUAGE_NAMES = {
    TargetLanguage.RUSSIAN: "Russian",
    TargetLanguage.ENGLISH: "English",
}


class Tone(str, Enum):
    """Style directive for the translated output."""
    NATURAL = "natural"
    FORMAL = "formal"
    SLANG = "slang"

    @classmethod
    def parse(cls, value: str | Tone) -> Tone:
        if isinstance(value, Tone):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown tone: {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown tone: {value}") from None


@dataclass(frozen=True)
class TranslationRequest:
    """A single request to the translation service.

    Attributes:
        text: Uzbek source text (non-empty after trimming)
        target: Language to translate into
        tone: Style used in the instruction
        system_instruction: Prompt sent as the system message
        temperature: Sampling temperature
    """
    text: str
    target: TargetLanguage
    tone: Tone
    system_instruction: str
    temperature: float


def _new_id() -> str:
    return uuid.uuid4().hex


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TranslationRecord:
    """One successful translation, as kept in the history log."""
    original: str
    translated: str
    target: TargetLanguage
    tone: Tone
    id: str = field(default_factory=_new_id)
    source: str = SOURCE_LANGUAGE
    timestamp: int = field(default_factory=_now_ms)

    @classmethod
    def from_request(cls, request: TranslationRequest, translated: str) -> TranslationRecord:
        return cls(
            original=request.text,
            translated=translated,
            target=request.target,
            tone=request.tone,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target.value,
            "tone": self.tone.value,
            "original": self.original,
            "translated": self.translated,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranslationRecord:
        """Rebuild a record, accepting the legacy ``from``/``to`` keys.

        Raises:
            KeyError, TypeError, ValueError: if the payload is not a record
        """
        if not isinstance(data, dict):
            raise TypeError(f"Record must be an object, got {type(data).__name__}")
        target = data.get("target", data.get("to"))
        if target is None:
            raise KeyError("target")
        original = data["original"]
        translated = data["translated"]
        if not isinstance(original, str) or not isinstance(translated, str):
            raise TypeError("original/translated must be strings")
        timestamp = data["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise TypeError("timestamp must be a number")
        return cls(
            id=str(data["id"]),
            source=str(data.get("source", data.get("from", SOURCE_LANGUAGE))),
            target=TargetLanguage.parse(target),
            tone=Tone.parse(data.get("tone", Tone.NATURAL.value)),
            original=original,
            translated=translated,
            timestamp=int(timestamp),
        )


# Newest first; owned by HistoryStore
HistoryLog = tuple[TranslationRecord, ...]
