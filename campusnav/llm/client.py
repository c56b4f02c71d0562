"""Provider adapters for the chat assistant.

Architectural role:
    Executes one HTTP request against the configured model provider and
    normalizes the outcome into a `ProviderResult`. Three interchangeable
    variants exist; exactly one is built per deployment by `build_adapter`.

Model invocation flow:
    `ConversationOrchestrator.submit` -> `ProviderAdapter.invoke(request)` ->
    credential check -> payload build -> `session.post(...)` -> parsed text or
    classified failure.

Variants:
    - `ChatCompletionAdapter`: OpenAI chat completions. History maps to
      role-tagged messages; the image rides on the current turn as a data URL.
    - `GenerativeContentAdapter`: Gemini `generateContent`. Prompt and history
      are flattened into one transcript; the image is a separate inline part.
    - `TextGenerationAdapter`: Hugging Face text-generation inference. Same
      transcript, but the backend cannot take images, so the current turn only
      carries an `[Image attached]` marker.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with the
    configured timeout (120s by default).

Failure handling model:
    Missing credentials short-circuit to `UNCONFIGURED` before any I/O. HTTP,
    transport and parsing problems are converted to `FailureResult` values so
    caller-side control flow stays stable; nothing is raised for provider
    failures.
"""

import logging
from abc import ABC, abstractmethod

import requests

from campusnav.llm.errors import failure_from_response
from campusnav.llm.provider_config import ProviderSettings
from campusnav.llm.types import (
    ContentPart,
    ErrorKind,
    FailureResult,
    HistoryMessage,
    ImagePart,
    ProviderRequest,
    ProviderResult,
    TextPart,
    TextResult,
)


logger = logging.getLogger(__name__)

IMAGE_MARKER = "[Image attached]"
ROLE_PREFIXES = {"user": "User:", "assistant": "Assistant:"}


class ProviderAdapter(ABC):
    """Capability shared by all provider variants: `invoke(request) -> result`.

    Subclasses supply the payload, headers and response parsing; the base
    class owns the credential check, transport and error classification.
    """

    def __init__(self, settings: ProviderSettings, session: requests.Session | None = None):
        self.settings = settings
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    def invoke(self, request: ProviderRequest) -> ProviderResult:
        if not self.settings.is_configured:
            return FailureResult(
                kind=ErrorKind.UNCONFIGURED,
                detail=f"{self.settings.key_env} is not set",
            )

        model = request.model or self.settings.model_for(request.has_image)

        try:
            response = self._session.post(
                self._url(model),
                headers=self._headers(),
                json=self._build_payload(request, model),
                timeout=self.settings.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as err:
            failure = failure_from_response(err.response)
            logger.warning(
                "%s request failed: kind=%s status=%s",
                self.settings.label,
                failure.kind.value,
                failure.status_code,
            )
            return failure

        except requests.exceptions.RequestException as err:
            logger.warning("%s request failed: %s", self.settings.label, err)
            return FailureResult(kind=ErrorKind.UNKNOWN, detail=str(err) or type(err).__name__)

        # requests' JSONDecodeError is also a ValueError
        try:
            data = response.json()
        except ValueError:
            logger.exception("%s returned a non-JSON body", self.settings.label)
            return FailureResult(kind=ErrorKind.UNKNOWN, detail="Invalid JSON in provider response")

        try:
            text = self._parse_text(data)
        except (KeyError, IndexError, TypeError):
            logger.exception("Unexpected %s response shape", self.settings.label)
            return FailureResult(kind=ErrorKind.UNKNOWN, detail="Unexpected provider response format")

        return TextResult(message=(text or "").strip())

    def _url(self, model: str) -> str:
        return self.settings.endpoint

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    @abstractmethod
    def _build_payload(self, request: ProviderRequest, model: str) -> dict:
        ...

    @abstractmethod
    def _parse_text(self, data) -> str | None:
        ...


# =========================================================
# CHAT COMPLETION (OpenAI)
# =========================================================

def _chat_part(part: ContentPart) -> dict:
    if isinstance(part, TextPart):
        return {"type": "text", "text": part.text}
    if isinstance(part, ImagePart):
        return {"type": "image_url", "image_url": {"url": part.image.to_data_url()}}
    raise TypeError(f"Unsupported content part: {type(part).__name__}")


class ChatCompletionAdapter(ProviderAdapter):

    def _build_payload(self, request: ProviderRequest, model: str) -> dict:
        messages = [{"role": "system", "content": request.system_prompt}]
        messages.extend(
            {"role": message.role, "content": message.content}
            for message in request.history
        )

        if request.has_image:
            content = [_chat_part(part) for part in request.current_parts()]
        else:
            content = request.current_text or ""

        messages.append({"role": "user", "content": content})

        return {
            "model": model,
            "messages": messages,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }

    def _parse_text(self, data) -> str | None:
        return data["choices"][0]["message"]["content"]


# =========================================================
# TRANSCRIPT FLATTENING (Gemini / text-generation inference)
# =========================================================

def flatten_transcript(system_prompt: str, history: tuple[HistoryMessage, ...], current_text: str) -> str:
    """Render prompt, history and the new turn as one `User:`/`Assistant:` transcript.

    The transcript ends with an `Assistant:` cue so completion-style backends
    continue as the assistant.
    """
    lines = [system_prompt.strip(), ""]
    for message in history:
        prefix = ROLE_PREFIXES.get(message.role, f"{message.role.capitalize()}:")
        lines.append(f"{prefix} {message.content}".rstrip())
    lines.append(f"User: {current_text}".rstrip())
    lines.append("Assistant:")
    return "\n".join(lines)


class GenerativeContentAdapter(ProviderAdapter):

    def _url(self, model: str) -> str:
        return self.settings.endpoint.format(model=model)

    def _headers(self) -> dict:
        return {
            "x-goog-api-key": self.settings.api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(self, request: ProviderRequest, model: str) -> dict:
        transcript = flatten_transcript(
            request.system_prompt,
            request.history,
            request.current_text or "",
        )

        parts = [{"text": transcript}]
        for part in request.current_parts():
            if isinstance(part, ImagePart):
                parts.append({
                    "inline_data": {
                        "mime_type": part.image.mime_type,
                        "data": part.image.to_base64(),
                    }
                })
            elif not isinstance(part, TextPart):
                raise TypeError(f"Unsupported content part: {type(part).__name__}")

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": request.temperature,
                "maxOutputTokens": request.max_tokens,
            },
        }

    def _parse_text(self, data) -> str | None:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


class TextGenerationAdapter(ProviderAdapter):

    def _url(self, model: str) -> str:
        return self.settings.endpoint.format(model=model)

    def _build_payload(self, request: ProviderRequest, model: str) -> dict:
        current_text = request.current_text or ""
        if request.has_image:
            current_text = f"{IMAGE_MARKER} {current_text}".rstrip()

        return {
            "inputs": flatten_transcript(request.system_prompt, request.history, current_text),
            "parameters": {
                "max_new_tokens": request.max_tokens,
                "temperature": request.temperature,
                "return_full_text": False,
            },
        }

    def _parse_text(self, data) -> str | None:
        if isinstance(data, list):
            data = data[0]
        return data["generated_text"]


ADAPTERS = {
    "openai": ChatCompletionAdapter,
    "gemini": GenerativeContentAdapter,
    "huggingface": TextGenerationAdapter,
}


def build_adapter(settings: ProviderSettings, session: requests.Session | None = None) -> ProviderAdapter:
    """Construct the single adapter variant matching `settings.provider`."""
    try:
        adapter_cls = ADAPTERS[settings.provider]
    except KeyError:
        raise ValueError(f"Unknown LLM provider: {settings.provider}") from None

    logger.info(
        "Using %s provider (configured=%s, text_model=%s, vision_model=%s)",
        settings.label,
        settings.is_configured,
        settings.text_model,
        settings.vision_model,
    )
    return adapter_cls(settings, session=session)
