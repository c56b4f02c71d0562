"""Provider-agnostic request/result contracts.

Architectural role:
    Defines the closed set of shapes exchanged between the conversation
    orchestrator and provider adapters. Adapters translate `ProviderRequest`
    into their native wire format and must map every native outcome onto
    `ProviderResult`.

Content model:
    `ContentPart` is a closed union of `TextPart` and `ImagePart`. Adapters
    dispatch on the concrete class and raise `TypeError` for anything else.

Failure model:
    Provider failures are values (`FailureResult`), never exceptions. Only
    `ErrorKind.UNKNOWN` is a hard failure; the other kinds are advisories the
    caller displays as ordinary content.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


DEFAULT_IMAGE_MIME = "image/jpeg"


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes with their MIME type."""

    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def __repr__(self) -> str:
        return f"ImagePayload(mime_type={self.mime_type!r}, size={len(self.data)})"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    image: ImagePayload


ContentPart = Union[TextPart, ImagePart]


@dataclass(frozen=True)
class HistoryMessage:
    """A prior turn projected to role and text; images are never replayed."""

    role: str
    content: str


@dataclass(frozen=True)
class ProviderRequest:
    """One provider call, assembled fresh for every submission.

    Attributes:
        system_prompt: Persona and task instructions.
        history: Prior turns in append order.
        current_text: Text of the new user turn, if any.
        current_image: Image of the new user turn, if any.
        model: Model id chosen for this request; adapters fall back to their
            configured default when empty.
        max_tokens: Completion token limit forwarded to providers that accept one.
        temperature: Sampling temperature.
    """

    system_prompt: str
    history: tuple[HistoryMessage, ...] = ()
    current_text: str | None = None
    current_image: ImagePayload | None = None
    model: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.7

    @property
    def has_image(self) -> bool:
        return self.current_image is not None

    def current_parts(self) -> list[ContentPart]:
        """Return the new turn as ordered parts: image first, then text."""
        parts: list[ContentPart] = []
        if self.current_image is not None:
            parts.append(ImagePart(self.current_image))
        if self.current_text and self.current_text.strip():
            parts.append(TextPart(self.current_text))
        return parts


class ErrorKind(str, Enum):
    UNCONFIGURED = "unconfigured"
    UNAUTHORIZED = "unauthorized"
    QUOTA_EXCEEDED = "quota_exceeded"
    RATE_LIMITED = "rate_limited"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class TextResult:
    message: str


@dataclass(frozen=True)
class FailureResult:
    kind: ErrorKind
    detail: str = ""
    status_code: int | None = field(default=None, compare=False)

    @property
    def is_soft(self) -> bool:
        """Soft failures are displayed as advice rather than treated as errors."""
        return self.kind is not ErrorKind.UNKNOWN


ProviderResult = Union[TextResult, FailureResult]
