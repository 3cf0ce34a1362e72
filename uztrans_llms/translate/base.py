"""
Base translator interface and implementations.

This module defines:
- Abstract Translator interface that all backends implement
- DemoTranslator: an offline stand-in returning deterministic text
- create_translator(): backend selection by name

Design Philosophy:
- Translators are stateless: they receive the request and credential in
  each call, never read them from ambient state
- ``translate`` either returns the final, trimmed text or raises a
  TranslationError; there are no partial results
- Easy to add new backends (any OpenAI-compatible endpoint is one class)
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from uztrans_llms.errors import EmptyResponseError
from uztrans_llms.models import TargetLanguage, TranslationRequest


class Translator(ABC):
    """Abstract base class for all translation backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the translator name (e.g., 'gemini-...', 'demo')."""

    @property
    def requires_credential(self) -> bool:
        """Whether ``translate`` needs a non-empty credential."""
        return True

    @abstractmethod
    async def translate(self, request: TranslationRequest, credential: Optional[str]) -> str:
        """Translate ``request.text``.

        Args:
            request: Request built by the prompt builder
            credential: API key for the service

        Returns:
            The translated text, stripped of surrounding whitespace

        Raises:
            MissingCredentialError: credential is empty (no call is made)
            ServiceFailureError: the service call failed
            EmptyResponseError: the service answered with no usable text
            TranslationTimeoutError: the service did not answer in time
        """

    @staticmethod
    def normalize(text: Optional[str]) -> str:
        """Strip the response and reject empty results."""
        cleaned = (text or "").strip()
        if not cleaned:
            raise EmptyResponseError("service returned no text")
        return cleaned


class DemoTranslator(Translator):
    """Offline translator for demos and UI work without an API key.

    Waits ``delay`` seconds, then returns a deterministic marker built from
    the source text, so the whole pipeline (history included) can be
    exercised end to end.
    """

    def __init__(self, delay: float = 0.6):
        self.delay = delay

    @property
    def name(self) -> str:
        return "demo"

    @property
    def requires_credential(self) -> bool:
        return False

    async def translate(self, request: TranslationRequest, credential: Optional[str] = None) -> str:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        tag = "RU" if request.target is TargetLanguage.RUSSIAN else "EN"
        return self.normalize(f"[{tag}/{request.tone.value}] {request.text}")


def create_translator(backend: str, **kwargs) -> Translator:
    """Factory function to create a translator by name.

    Args:
        backend: Backend name or alias
        **kwargs: ``model``, ``timeout``, ``config``, ``client`` for LLM
            backends; ``delay`` for the demo backend

    Supported backends and aliases:
        - gemini, google: Google Gemini (default)
        - openai, gpt: OpenAI chat models
        - demo, offline, test: DemoTranslator, no network
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("demo", "offline", "test"):
        return DemoTranslator(delay=kwargs.get("delay", 0.6))

    if backend_lower in ("gemini", "google"):
        from uztrans_llms.translate.llm import GeminiTranslator
        return GeminiTranslator(config=_llm_config(GeminiTranslator, kwargs), client=kwargs.get("client"))

    if backend_lower in ("openai", "gpt"):
        from uztrans_llms.translate.llm import OpenAITranslator
        return OpenAITranslator(config=_llm_config(OpenAITranslator, kwargs), client=kwargs.get("client"))

    raise ValueError(
        f"Unknown translator backend: {backend}. "
        "Available backends: gemini, openai, demo"
    )


def _llm_config(translator_cls, kwargs: dict):
    from uztrans_llms.translate.llm import LLMConfig

    if kwargs.get("config") is not None:
        return kwargs["config"]
    config = LLMConfig(model=kwargs.get("model") or translator_cls.DEFAULT_MODEL)
    if kwargs.get("timeout") is not None:
        config.timeout = kwargs["timeout"]
    return config
