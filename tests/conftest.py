"""Shared fixtures for UzTrans-LLMs tests."""

import asyncio
import os
import tempfile
from types import SimpleNamespace

# Keep config.DATA_DIR away from the real home directory
os.environ.setdefault("UZTRANS_HOME", tempfile.mkdtemp(prefix="uztrans-test-"))

import pytest

from uztrans_llms.config import AppSettings
from uztrans_llms.history import HistoryStore
from uztrans_llms.models import TargetLanguage, Tone, TranslationRecord
from uztrans_llms.storage import MemoryStorage


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``."""

    def __init__(self, content=None, error=None, delay=0.0, choices=True):
        self.content = content
        self.error = error
        self.delay = delay
        self.choices = choices
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


class FailingStorage(MemoryStorage):
    """Storage whose writes fail, like a full disk."""

    def set(self, key, value):
        raise OSError("disk full")


@pytest.fixture
def fake_client_factory():
    return FakeClient


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def history(storage):
    store = HistoryStore(storage, max_entries=5)
    store.load()
    return store


@pytest.fixture
def settings():
    return AppSettings(
        api_key="test-key-123",
        success_reset_delay=0.05,
        error_reset_delay=0.05,
    )


def make_record(n: int, target=TargetLanguage.RUSSIAN, tone=Tone.NATURAL) -> TranslationRecord:
    return TranslationRecord(
        original=f"matn {n}",
        translated=f"текст {n}",
        target=target,
        tone=tone,
        timestamp=1_700_000_000_000 + n,
    )
