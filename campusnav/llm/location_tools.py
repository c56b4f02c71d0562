"""Single-purpose location extraction helpers built on a provider adapter.

Both helpers issue one request with a narrow prompt and no history. They are
auxiliary entry points used by the HTTP/CLI adapters; the chat orchestrator
does not depend on them.
"""

import logging
import re
from dataclasses import dataclass

from campusnav.llm.client import ProviderAdapter
from campusnav.llm.types import (
    ErrorKind,
    FailureResult,
    ImagePayload,
    ProviderRequest,
    ProviderResult,
    TextResult,
)
from campusnav.prompting.prompts import (
    DETECT_LOCATION_PROMPT,
    PARSE_LOCATION_PROMPT,
    UNKNOWN_LOCATION,
)


logger = logging.getLogger(__name__)

# Credential problems degrade to a local answer instead of an error.
FALLBACK_KINDS = (ErrorKind.UNCONFIGURED, ErrorKind.UNAUTHORIZED)
FALLBACK_LOCATION = "Main Entrance"

_LEADING_FILLER = re.compile(r"^(i'm|i am|at|in|the)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class LocationGuess:
    """Extracted location text plus the provider outcome that produced it.

    `location` is `None` only when the provider failed and no local fallback
    applies; callers then render `result` as an advisory. When a fallback was
    used, `result` is the `FailureResult` that triggered it.
    """

    location: str | None
    result: ProviderResult


def fallback_normalize(text: str) -> str:
    """Local normalization used when the provider credential is unusable.

    Lowercases, drops one leading filler word ("i'm", "at", "the", ...) and
    capitalizes the first letter: "I'm at the library" -> "At the library".
    """
    normalized = _LEADING_FILLER.sub("", text.lower(), count=1).strip()
    return normalized[:1].upper() + normalized[1:]


def describe_image(adapter: ProviderAdapter, image: ImagePayload) -> LocationGuess:
    """Ask the provider to name the campus location shown in `image`.

    A missing or rejected credential yields `FALLBACK_LOCATION`.
    """
    request = ProviderRequest(
        system_prompt=DETECT_LOCATION_PROMPT,
        current_image=image,
        max_tokens=150,
    )
    result = adapter.invoke(request)

    if isinstance(result, FailureResult):
        if result.kind in FALLBACK_KINDS:
            logger.info("Provider credential unusable; falling back to %s", FALLBACK_LOCATION)
            return LocationGuess(location=FALLBACK_LOCATION, result=result)
        return LocationGuess(location=None, result=result)

    return LocationGuess(location=result.message.strip() or UNKNOWN_LOCATION, result=result)


def normalize_location_text(adapter: ProviderAdapter, text: str) -> LocationGuess:
    """Ask the provider to rewrite free text as a canonical location name.

    A blank reply keeps the caller's text. A missing or rejected credential
    falls back to `fallback_normalize`.
    """
    request = ProviderRequest(
        system_prompt=PARSE_LOCATION_PROMPT,
        current_text=text,
        max_tokens=100,
        temperature=0.3,
    )
    result = adapter.invoke(request)

    if isinstance(result, TextResult):
        return LocationGuess(location=result.message.strip() or text, result=result)

    if result.kind in FALLBACK_KINDS:
        logger.info("Provider credential unusable; using local location normalization")
        return LocationGuess(location=fallback_normalize(text), result=result)

    return LocationGuess(location=None, result=result)
