"""
Project-wide configuration, directory structure and user settings.

Module Contents:
    APP_NAME: Application name for display purposes
    DATA_DIR: Per-user data directory (``~/.uztrans`` or ``$UZTRANS_HOME``)
    STORAGE_FILE: JSON document backing the key-value storage
    SETTINGS_FILE: Non-secret user preferences
    STORAGE_KEY: Storage key of the persisted history
    HISTORY_MAX_ENTRIES: Capacity of the history log
    DEFAULT_TEMPERATURE, DEFAULT_TIMEOUT: Translation call parameters
    AppSettings: User preferences consumed by the orchestrator

The data directory is created automatically when the module is imported.

Example:
    >>> from uztrans_llms.config import AppSettings
    >>> settings = AppSettings.load()
    >>> print(settings.target.display_name)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from uztrans_llms.models import TargetLanguage, Tone

logger = logging.getLogger(__name__)

# Application name for display and identification
APP_NAME = "UzTrans-LLMs"

# Per-user data directory (storage, settings, key fallback file)
DATA_DIR = Path(os.getenv("UZTRANS_HOME", Path.home() / ".uztrans"))

# Key-value storage document
STORAGE_FILE = DATA_DIR / "storage.json"

# Non-secret preferences
SETTINGS_FILE = DATA_DIR / "settings.json"

# History persistence
STORAGE_KEY = "uztrans.history.v1"
HISTORY_SCHEMA_VERSION = 1
HISTORY_MAX_ENTRIES = 50

# Translation call parameters
DEFAULT_BACKEND = "gemini"
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TIMEOUT = 20.0

# Seconds a finished state stays visible before returning to READY
SUCCESS_RESET_DELAY = 2.0
ERROR_RESET_DELAY = 5.0

DATA_DIR.mkdir(parents=True, exist_ok=True)


@dataclass
class AppSettings:
    """User preferences for a translation session.

    The credential is carried here so it can be handed explicitly to the
    translator, but it is never written to ``settings.json``.
    """
    target: TargetLanguage = TargetLanguage.RUSSIAN
    tone: Tone = Tone.NATURAL
    backend: str = DEFAULT_BACKEND
    model: Optional[str] = None
    temperature: float = DEFAULT_TEMPERATURE
    timeout: float = DEFAULT_TIMEOUT
    success_reset_delay: float = SUCCESS_RESET_DELAY
    error_reset_delay: float = ERROR_RESET_DELAY
    api_key: Optional[str] = None

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def to_dict(self) -> dict:
        """Serialize preferences (without the credential)."""
        data = asdict(self)
        data.pop("api_key")
        data["target"] = self.target.value
        data["tone"] = self.tone.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> AppSettings:
        settings = cls()
        if "target" in data:
            settings.target = TargetLanguage.parse(data["target"])
        # Earlier builds stored the pair as a single "mode" (UZ_RU / UZ_EN)
        elif "mode" in data:
            settings.target = TargetLanguage.parse(data["mode"])
        if "tone" in data:
            settings.tone = Tone.parse(data["tone"])
        for name in ("backend", "model"):
            if name in data:
                setattr(settings, name, data[name])
        for name in ("temperature", "timeout", "success_reset_delay", "error_reset_delay"):
            if name in data:
                setattr(settings, name, float(data[name]))
        return settings

    @classmethod
    def load(cls, path: Path = SETTINGS_FILE) -> AppSettings:
        """Load preferences, falling back to defaults on missing or bad files."""
        if not path.exists():
            return cls()
        try:
            return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable settings file {path}: {e}")
            return cls()

    def save(self, path: Path = SETTINGS_FILE) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
