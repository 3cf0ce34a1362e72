"""Persisted, capacity-bounded history of translations."""

from __future__ import annotations

import json
import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Optional

from uztrans_llms.config import HISTORY_MAX_ENTRIES, HISTORY_SCHEMA_VERSION, STORAGE_KEY
from uztrans_llms.errors import StorageCorruptError
from uztrans_llms.models import HistoryLog, TranslationRecord
from uztrans_llms.storage import KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass
class HistoryStats:
    total: int = 0
    characters: int = 0
    by_target: dict[str, int] = field(default_factory=dict)
    by_tone: dict[str, int] = field(default_factory=dict)
    last_timestamp: Optional[int] = None


class HistoryStore:
    """Newest-first log of translation records.

    The store is the only writer of its storage key. Every mutation is
    written through immediately, so the persisted snapshot always equals
    the in-memory one. When full, appending drops the oldest record.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        max_entries: int = HISTORY_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.storage = storage
        self.key = key
        self.max_entries = max_entries
        self._entries: Deque[TranslationRecord] = deque(maxlen=max_entries)

    @property
    def records(self) -> HistoryLog:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> HistoryLog:
        """Restore the log from storage. Unreadable data yields an empty log."""
        self._entries.clear()
        raw = self.storage.get(self.key)
        if raw is None:
            return self.records
        try:
            records = self._decode(raw)
        except StorageCorruptError as e:
            logger.warning(f"Discarding corrupt history under '{self.key}': {e.detail}")
            return self.records
        # Stored newest first; anything past capacity is the oldest
        self._entries.extend(records[: self.max_entries])
        return self.records

    def append(self, record: TranslationRecord) -> HistoryLog:
        """Put ``record`` first, evict from the tail if needed, then persist.

        The in-memory log only changes once the snapshot has been written,
        so a failed write leaves both sides as they were.
        """
        entries = deque(self._entries, maxlen=self.max_entries)
        entries.appendleft(record)
        self._persist(entries)
        self._entries = entries
        return self.records

    def clear(self) -> None:
        self.storage.remove(self.key)
        self._entries.clear()

    def stats(self) -> HistoryStats:
        if not self._entries:
            return HistoryStats()
        return HistoryStats(
            total=len(self._entries),
            characters=sum(len(r.original) for r in self._entries),
            by_target=dict(Counter(r.target.value for r in self._entries)),
            by_tone=dict(Counter(r.tone.value for r in self._entries)),
            last_timestamp=self._entries[0].timestamp,
        )

    def _persist(self, entries: Deque[TranslationRecord]) -> None:
        payload = {
            "version": HISTORY_SCHEMA_VERSION,
            "records": [r.to_dict() for r in entries],
        }
        self.storage.set(self.key, json.dumps(payload, ensure_ascii=False))

    def _decode(self, raw: str) -> list[TranslationRecord]:
        try:
            payload = json.loads(raw)
        except ValueError as e:
            raise StorageCorruptError(f"invalid JSON: {e}") from e

        # A bare array is the format written before the schema was versioned
        if isinstance(payload, list):
            items = payload
        elif isinstance(payload, dict):
            version = payload.get("version")
            if version != HISTORY_SCHEMA_VERSION:
                raise StorageCorruptError(f"unsupported schema version {version!r}")
            items = payload.get("records")
            if not isinstance(items, list):
                raise StorageCorruptError("'records' is not a list")
        else:
            raise StorageCorruptError(f"unexpected payload type {type(payload).__name__}")

        try:
            return [TranslationRecord.from_dict(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageCorruptError(f"invalid record: {e!r}") from e
