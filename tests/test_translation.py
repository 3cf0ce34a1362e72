"""
Tests for the translation backends.

Tests cover:
- Credential checks before any network call
- Request payload (system instruction, temperature, content)
- Response normalization (trimming, empty responses, wrappers)
- Service failures and timeouts
- Demo backend and the backend factory

Run with: pytest tests/test_translation.py -v
"""

from types import SimpleNamespace

import httpx
import pytest
from openai import APITimeoutError

from conftest import FakeClient
from uztrans_llms.errors import (
    EmptyResponseError,
    ErrorKind,
    MissingCredentialError,
    ServiceFailureError,
    TranslationTimeoutError,
)
from uztrans_llms.models import TargetLanguage, Tone
from uztrans_llms.translate.base import DemoTranslator, create_translator
from uztrans_llms.translate.llm import (
    GeminiTranslator,
    LLMConfig,
    OpenAITranslator,
)
from uztrans_llms.translate.prompting import build_request


async def malformed_create(**kwargs):
    # A choice without a message object
    return SimpleNamespace(choices=[SimpleNamespace()])


@pytest.fixture
def request_ru():
    return build_request("Salom", TargetLanguage.RUSSIAN, Tone.NATURAL)


class TestCredentialCheck:
    """An empty credential fails without touching the service."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("credential", ["", "   ", None])
    async def test_missing_credential(self, fake_client_factory, request_ru, credential):
        client = fake_client_factory(content="Привет")
        translator = GeminiTranslator(client=client)

        with pytest.raises(MissingCredentialError) as exc_info:
            await translator.translate(request_ru, credential)

        assert exc_info.value.kind is ErrorKind.MISSING_CREDENTIAL
        assert len(client.completions.calls) == 0


class TestRequestPayload:
    @pytest.mark.asyncio
    async def test_sends_instruction_text_and_temperature(self, fake_client_factory, request_ru):
        client = fake_client_factory(content="Привет")
        translator = GeminiTranslator(client=client)

        await translator.translate(request_ru, "key")

        assert len(client.completions.calls) == 1
        call = client.completions.calls[0]
        assert call["model"] == GeminiTranslator.DEFAULT_MODEL
        assert call["temperature"] == request_ru.temperature
        assert call["messages"] == [
            {"role": "system", "content": request_ru.system_instruction},
            {"role": "user", "content": "Salom"},
        ]

    @pytest.mark.asyncio
    async def test_model_from_config(self, fake_client_factory, request_ru):
        client = fake_client_factory(content="Hello")
        translator = OpenAITranslator(config=LLMConfig(model="gpt-4o"), client=client)

        await translator.translate(request_ru, "key")

        assert client.completions.calls[0]["model"] == "gpt-4o"
        assert translator.name == "openai-gpt-4o"


class TestResponseNormalization:
    @pytest.mark.asyncio
    async def test_trims_whitespace(self, fake_client_factory, request_ru):
        translator = GeminiTranslator(client=fake_client_factory(content="  Привет  \n"))
        assert await translator.translate(request_ru, "key") == "Привет"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   \n\t ", None])
    async def test_empty_response_is_an_error(self, fake_client_factory, request_ru, content):
        translator = GeminiTranslator(client=fake_client_factory(content=content))

        with pytest.raises(EmptyResponseError):
            await translator.translate(request_ru, "key")

    @pytest.mark.asyncio
    async def test_no_choices_is_empty_response(self, fake_client_factory, request_ru):
        translator = GeminiTranslator(client=fake_client_factory(choices=False))

        with pytest.raises(EmptyResponseError):
            await translator.translate(request_ru, "key")

    @pytest.mark.asyncio
    async def test_strips_code_fence_and_prefix(self, fake_client_factory, request_ru):
        content = "```\nTranslation: Привет, как дела?\n```"
        translator = GeminiTranslator(client=fake_client_factory(content=content))

        assert await translator.translate(request_ru, "key") == "Привет, как дела?"


class TestServiceFailures:
    @pytest.mark.asyncio
    async def test_transport_error_becomes_service_failure(self, fake_client_factory, request_ru):
        client = fake_client_factory(error=ConnectionError("connection reset by peer"))
        translator = GeminiTranslator(client=client)

        with pytest.raises(ServiceFailureError) as exc_info:
            await translator.translate(request_ru, "key")

        error = exc_info.value
        assert "connection reset by peer" in error.detail
        assert "connection reset" not in error.user_message
        assert len(client.completions.calls) == 1  # no retry

    @pytest.mark.asyncio
    async def test_failure_is_logged(self, fake_client_factory, request_ru, caplog):
        translator = GeminiTranslator(client=fake_client_factory(error=RuntimeError("HTTP 503")))

        with pytest.raises(ServiceFailureError):
            await translator.translate(request_ru, "key")

        assert "HTTP 503" in caplog.text

    @pytest.mark.asyncio
    async def test_sdk_timeout_is_a_timeout(self, fake_client_factory, request_ru):
        request = httpx.Request("POST", "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions")
        client = fake_client_factory(error=APITimeoutError(request=request))
        translator = GeminiTranslator(client=client)

        with pytest.raises(TranslationTimeoutError):
            await translator.translate(request_ru, "key")

    @pytest.mark.asyncio
    async def test_malformed_response_is_service_failure(self, request_ru):
        client = FakeClient(content="x")
        client.completions.create = malformed_create
        translator = GeminiTranslator(client=client)

        with pytest.raises(ServiceFailureError, match="malformed response"):
            await translator.translate(request_ru, "key")

    @pytest.mark.asyncio
    async def test_timeout(self, fake_client_factory, request_ru):
        client = fake_client_factory(content="late", delay=1.0)
        translator = GeminiTranslator(config=LLMConfig(timeout=0.05), client=client)

        with pytest.raises(TranslationTimeoutError):
            await translator.translate(request_ru, "key")


class TestDemoTranslator:
    @pytest.mark.asyncio
    async def test_deterministic_output_without_credential(self, request_ru):
        translator = DemoTranslator(delay=0)

        first = await translator.translate(request_ru, None)
        second = await translator.translate(request_ru, None)

        assert first == second == "[RU/natural] Salom"
        assert not translator.requires_credential


class TestFactory:
    @pytest.mark.parametrize("backend,cls", [
        ("gemini", GeminiTranslator),
        ("google", GeminiTranslator),
        ("openai", OpenAITranslator),
        ("GPT", OpenAITranslator),
        ("demo", DemoTranslator),
    ])
    def test_backend_aliases(self, backend, cls):
        assert isinstance(create_translator(backend), cls)

    def test_model_and_timeout_kwargs(self):
        translator = create_translator("openai", model="gpt-4o", timeout=5.0)
        assert translator.config.model == "gpt-4o"
        assert translator.config.timeout == 5.0

    def test_default_model(self):
        assert create_translator("gemini").config.model == "gemini-3-flash-preview"

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown translator backend"):
            create_translator("babelfish")
