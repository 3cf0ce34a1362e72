"""
LLM-based translation backends.

This module provides:
- Google Gemini translator (through Gemini's OpenAI-compatible endpoint)
- OpenAI GPT translator
- A shared base that sends one chat completion per request

Both backends talk through the ``openai`` async client. Calls are made
once: the SDK's own retry loop is switched off and a hung request is cut
by ``LLMConfig.timeout``.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC
from dataclasses import dataclass
from typing import Any, Optional

from openai import APITimeoutError, AsyncOpenAI

from uztrans_llms.config import DEFAULT_TIMEOUT
from uztrans_llms.errors import (
    MissingCredentialError,
    ServiceFailureError,
    TranslationTimeoutError,
)
from uztrans_llms.models import TranslationRequest
from uztrans_llms.translate.base import Translator

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for LLM translators."""
    model: str = "gemini-3-flash-preview"
    max_tokens: int = 2048
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


class BaseLLMTranslator(Translator, ABC):
    """Base class for chat-completion translators.

    Provides common functionality:
    - Message construction from a TranslationRequest
    - Response parsing and normalization
    - Error conversion into the TranslationError taxonomy
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_BASE_URL: Optional[str] = None
    provider = "llm"

    def __init__(self, config: Optional[LLMConfig] = None, client: Any = None):
        self.config = config or LLMConfig(model=self.DEFAULT_MODEL)
        self._client = client
        self._client_key: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.provider}-{self.config.model}"

    def _get_client(self, credential: str):
        """Create (or reuse) the async client for this credential."""
        if self._client is None or (self._client_key is not None and self._client_key != credential):
            self._client = AsyncOpenAI(
                api_key=credential,
                base_url=self.config.base_url or self.DEFAULT_BASE_URL,
                max_retries=0,
                timeout=self.config.timeout,
            )
            self._client_key = credential
        return self._client

    def build_messages(self, request: TranslationRequest) -> list[dict]:
        return [
            {"role": "system", "content": request.system_instruction},
            {"role": "user", "content": request.text},
        ]

    def parse_response(self, response: Optional[str]) -> str:
        """Remove wrappers some models add despite the instruction."""
        cleaned = (response or "").strip()

        if cleaned.startswith("```"):
            lines = cleaned.split("\n")
            if len(lines) > 1 and lines[-1].strip() == "```":
                lines = lines[1:-1]
            else:
                lines = lines[1:]
            cleaned = "\n".join(lines).strip()

        prefixes = ["Translation:", "Translated text:", "Here is the translation:"]
        for prefix in prefixes:
            if cleaned.lower().startswith(prefix.lower()):
                cleaned = cleaned[len(prefix):].strip()

        return cleaned

    @staticmethod
    def _extract_text(response: Any) -> Optional[str]:
        choices = getattr(response, "choices", None)
        if not choices:
            return None
        return choices[0].message.content

    async def translate(self, request: TranslationRequest, credential: Optional[str]) -> str:
        if not credential or not credential.strip():
            raise MissingCredentialError(f"no API key configured for {self.provider}")

        client = self._get_client(credential.strip())

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.config.model,
                    messages=self.build_messages(request),
                    temperature=request.temperature,
                    max_tokens=self.config.max_tokens,
                ),
                timeout=self.config.timeout,
            )
        except (asyncio.TimeoutError, APITimeoutError) as e:
            logger.error(f"{self.name} translation timed out after {self.config.timeout}s")
            raise TranslationTimeoutError(f"no response within {self.config.timeout}s") from e
        except Exception as e:
            logger.error(f"{self.name} translation failed: {e}")
            raise ServiceFailureError(str(e) or type(e).__name__) from e

        try:
            text = self._extract_text(response)
        except (AttributeError, IndexError, TypeError) as e:
            logger.error(f"{self.name} returned an unexpected response: {e}")
            raise ServiceFailureError(f"malformed response: {e}") from e

        return self.normalize(self.parse_response(text))


class GeminiTranslator(BaseLLMTranslator):
    """Google Gemini translator.

    Uses Gemini's OpenAI-compatible chat endpoint.

    Usage:
        translator = GeminiTranslator()
        text = await translator.translate(request, api_key)
    """

    DEFAULT_MODEL = "gemini-3-flash-preview"
    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
    provider = "gemini"


class OpenAITranslator(BaseLLMTranslator):
    """OpenAI GPT-based translator (gpt-4o-mini by default)."""

    DEFAULT_MODEL = "gpt-4o-mini"
    provider = "openai"
