"""Tests for the provider adapters."""

import base64

import pytest
import requests

from campusnav.llm.client import (
    IMAGE_MARKER,
    ChatCompletionAdapter,
    GenerativeContentAdapter,
    TextGenerationAdapter,
    build_adapter,
    flatten_transcript,
)
from campusnav.llm.types import (
    ErrorKind,
    FailureResult,
    HistoryMessage,
    ImagePayload,
    ProviderRequest,
    TextResult,
)
from tests.fakes import FakeResponse, RecordingSession, make_settings


IMAGE = ImagePayload(data=b"\x89PNG-bytes", mime_type="image/png")

HISTORY = (
    HistoryMessage("user", "I'm in Room 150"),
    HistoryMessage("assistant", "Where would you like to go?"),
    HistoryMessage("user", ""),
)


def chat_response(text: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": text}}]})


# =============================================================================
# Credential check
# =============================================================================


class TestUnconfigured:

    @pytest.mark.parametrize("adapter_cls", [ChatCompletionAdapter, GenerativeContentAdapter, TextGenerationAdapter])
    def test_missing_credential_makes_no_request(self, adapter_cls) -> None:
        session = RecordingSession()
        adapter = adapter_cls(make_settings(api_key=None), session=session)

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert isinstance(result, FailureResult)
        assert result.kind is ErrorKind.UNCONFIGURED
        assert result.is_soft
        assert session.calls == []


# =============================================================================
# Chat completion
# =============================================================================


class TestChatCompletionAdapter:

    def test_text_only_payload(self) -> None:
        session = RecordingSession(chat_response("  Where are you now?  "))
        adapter = ChatCompletionAdapter(make_settings(endpoint="https://api.test/v1/chat"), session=session)

        result = adapter.invoke(
            ProviderRequest(system_prompt="sys", history=HISTORY, current_text="Take me to the library")
        )

        assert result == TextResult("Where are you now?")
        call = session.calls[0]
        assert call["url"] == "https://api.test/v1/chat"
        assert call["headers"]["Authorization"] == "Bearer test-key"
        assert call["timeout"] == 5.0
        payload = call["json"]
        assert payload["model"] == "text-model"
        assert payload["max_tokens"] == 1000
        assert payload["temperature"] == 0.7
        assert payload["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "I'm in Room 150"},
            {"role": "assistant", "content": "Where would you like to go?"},
            {"role": "user", "content": ""},
            {"role": "user", "content": "Take me to the library"},
        ]

    def test_image_rides_on_current_turn(self) -> None:
        session = RecordingSession(chat_response("That looks like the Library."))
        adapter = ChatCompletionAdapter(make_settings(), session=session)

        adapter.invoke(ProviderRequest(system_prompt="sys", current_text="where am I?", current_image=IMAGE))

        payload = session.calls[0]["json"]
        assert payload["model"] == "vision-model"
        expected_url = "data:image/png;base64," + base64.b64encode(IMAGE.data).decode("ascii")
        assert payload["messages"][-1] == {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": expected_url}},
                {"type": "text", "text": "where am I?"},
            ],
        }

    def test_explicit_model_wins(self) -> None:
        session = RecordingSession(chat_response("ok"))
        adapter = ChatCompletionAdapter(make_settings(), session=session)

        adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi", model="custom-model"))

        assert session.calls[0]["json"]["model"] == "custom-model"

    def test_quota_error(self) -> None:
        response = FakeResponse(
            429,
            {"error": {"message": "You exceeded your current quota", "type": "insufficient_quota", "code": "insufficient_quota"}},
        )
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(response))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.QUOTA_EXCEEDED
        assert result.status_code == 429

    def test_rate_limit_error(self) -> None:
        response = FakeResponse(429, {"error": {"message": "Rate limit reached", "code": "rate_limit_exceeded"}})
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(response))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.RATE_LIMITED

    def test_auth_error(self) -> None:
        response = FakeResponse(401, {"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}})
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(response))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.UNAUTHORIZED

    def test_server_error_keeps_native_message(self) -> None:
        response = FakeResponse(500, {"error": {"message": "The server had an error"}})
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(response))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result == FailureResult(ErrorKind.UNKNOWN, "The server had an error")
        assert not result.is_soft

    def test_transport_error(self) -> None:
        session = RecordingSession(error=requests.exceptions.ConnectionError("connection refused"))
        adapter = ChatCompletionAdapter(make_settings(), session=session)

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.UNKNOWN
        assert "connection refused" in result.detail

    def test_malformed_response(self) -> None:
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(FakeResponse(200, {"choices": []})))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.UNKNOWN

    def test_null_content_becomes_empty_text(self) -> None:
        adapter = ChatCompletionAdapter(make_settings(), session=RecordingSession(chat_response(None)))

        assert adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi")) == TextResult("")


# =============================================================================
# Transcript-based variants
# =============================================================================


class TestFlattenTranscript:

    def test_layout(self) -> None:
        transcript = flatten_transcript("System text", HISTORY, "Take me to N-201")

        assert transcript == (
            "System text\n"
            "\n"
            "User: I'm in Room 150\n"
            "Assistant: Where would you like to go?\n"
            "User:\n"
            "User: Take me to N-201\n"
            "Assistant:"
        )


class TestGenerativeContentAdapter:

    def test_payload_and_parse(self) -> None:
        response = FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": "You are at "}, {"text": "the Library."}]}}]})
        session = RecordingSession(response)
        adapter = GenerativeContentAdapter(make_settings(provider="gemini"), session=session)

        result = adapter.invoke(
            ProviderRequest(system_prompt="sys", history=HISTORY[:2], current_text="where?", current_image=IMAGE)
        )

        assert result == TextResult("You are at the Library.")
        call = session.calls[0]
        assert call["url"] == "https://llm.test/vision-model"
        assert call["headers"]["x-goog-api-key"] == "test-key"
        parts = call["json"]["contents"][0]["parts"]
        assert parts[0]["text"] == flatten_transcript("sys", HISTORY[:2], "where?")
        assert parts[1] == {"inline_data": {"mime_type": "image/png", "data": IMAGE.to_base64()}}
        assert len(parts) == 2
        assert call["json"]["generationConfig"] == {"temperature": 0.7, "maxOutputTokens": 1000}

    def test_text_only_has_single_part(self) -> None:
        session = RecordingSession(FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": "ok"}]}}]}))
        adapter = GenerativeContentAdapter(make_settings(provider="gemini"), session=session)

        adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert session.calls[0]["url"] == "https://llm.test/text-model"
        assert len(session.calls[0]["json"]["contents"][0]["parts"]) == 1

    def test_blocked_response_is_unknown(self) -> None:
        adapter = GenerativeContentAdapter(
            make_settings(provider="gemini"),
            session=RecordingSession(FakeResponse(200, {"promptFeedback": {"blockReason": "SAFETY"}})),
        )

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.UNKNOWN


class TestTextGenerationAdapter:

    def test_image_marker_replaces_image_bytes(self) -> None:
        session = RecordingSession(FakeResponse(200, [{"generated_text": " Looks like a hallway. "}]))
        adapter = TextGenerationAdapter(make_settings(provider="huggingface"), session=session)

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="where am I?", current_image=IMAGE))

        assert result == TextResult("Looks like a hallway.")
        payload = session.calls[0]["json"]
        assert f"User: {IMAGE_MARKER} where am I?" in payload["inputs"]
        assert IMAGE.to_base64() not in str(payload)
        assert payload["parameters"]["return_full_text"] is False
        assert session.calls[0]["headers"]["Authorization"] == "Bearer test-key"

    def test_image_only_turn(self) -> None:
        session = RecordingSession(FakeResponse(200, {"generated_text": "ok"}))
        adapter = TextGenerationAdapter(make_settings(provider="huggingface"), session=session)

        adapter.invoke(ProviderRequest(system_prompt="sys", current_image=IMAGE))

        assert session.calls[0]["json"]["inputs"].endswith(f"User: {IMAGE_MARKER}\nAssistant:")

    def test_payment_required_is_quota(self) -> None:
        response = FakeResponse(402, {"error": "You have exceeded your monthly included credits"})
        adapter = TextGenerationAdapter(make_settings(provider="huggingface"), session=RecordingSession(response))

        result = adapter.invoke(ProviderRequest(system_prompt="sys", current_text="hi"))

        assert result.kind is ErrorKind.QUOTA_EXCEEDED


class TestBuildAdapter:

    @pytest.mark.parametrize(
        "provider, adapter_cls",
        [
            ("openai", ChatCompletionAdapter),
            ("gemini", GenerativeContentAdapter),
            ("huggingface", TextGenerationAdapter),
        ],
    )
    def test_variant_per_provider(self, provider, adapter_cls) -> None:
        adapter = build_adapter(make_settings(provider=provider), session=RecordingSession())

        assert type(adapter) is adapter_cls

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            build_adapter(make_settings(provider="nope"))
