"""Provider error classification and user-facing advisory text.

Classification is shared by every adapter so that the three native error
shapes (OpenAI `error.code`, Gemini `error.status`, Hugging Face plain
`error` strings) land on the same `ErrorKind`:

    401 / 403 / invalid-key message      -> UNAUTHORIZED
    402, or 429 with a billing signal    -> QUOTA_EXCEEDED
    other 429 / RESOURCE_EXHAUSTED       -> RATE_LIMITED
    anything else                        -> UNKNOWN (native message kept)
"""

from campusnav.llm.provider_config import ProviderSettings
from campusnav.llm.types import ErrorKind, FailureResult


QUOTA_SIGNALS = ("quota", "billing", "credits", "payment required")
INVALID_KEY_SIGNALS = ("api_key_invalid", "invalid_api_key", "api key not valid", "incorrect api key", "invalid api key")

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."


def extract_error_info(response) -> tuple[str | None, str]:
    """Pull `(code, message)` out of a provider error response.

    Understands `{"error": {"code"|"status", "message"}}` and
    `{"error": "text"}` bodies; anything unparsable falls back to the raw
    response text.
    """
    try:
        body = response.json()
    except ValueError:
        return None, (getattr(response, "text", "") or "").strip()

    error = body.get("error") if isinstance(body, dict) else None

    if isinstance(error, dict):
        code = error.get("code") if isinstance(error.get("code"), str) else None
        code = code or error.get("status") or error.get("type")
        return code, str(error.get("message") or "")

    if isinstance(error, str):
        return None, error

    return None, (getattr(response, "text", "") or "").strip()


def classify_http_error(status_code: int | None, code: str | None = None, message: str = "") -> ErrorKind:
    """Map a native HTTP failure onto the shared `ErrorKind` taxonomy."""
    text = f"{code or ''} {message or ''}".lower()

    if status_code in (401, 403) or any(signal in text for signal in INVALID_KEY_SIGNALS):
        return ErrorKind.UNAUTHORIZED

    if status_code == 402:
        return ErrorKind.QUOTA_EXCEEDED

    if status_code == 429 and any(signal in text for signal in QUOTA_SIGNALS):
        return ErrorKind.QUOTA_EXCEEDED

    if status_code == 429 or "resource_exhausted" in text:
        return ErrorKind.RATE_LIMITED

    return ErrorKind.UNKNOWN


def failure_from_response(response) -> FailureResult:
    status_code = getattr(response, "status_code", None)
    code, message = extract_error_info(response)
    kind = classify_http_error(status_code, code, message)
    detail = message or f"HTTP {status_code}"
    return FailureResult(kind=kind, detail=detail, status_code=status_code)


def advisory_message(failure: FailureResult, settings: ProviderSettings) -> str:
    """Render remediation text for a classified provider failure.

    Soft kinds explain what to do (which variable to set, where to add
    credits, to wait). `UNKNOWN` includes the native provider message for
    diagnosis.
    """
    label = settings.label

    if failure.kind is ErrorKind.UNCONFIGURED:
        return (
            f"{label} API key is not configured. "
            f"Please set {settings.key_env} in your environment variables."
        )

    if failure.kind is ErrorKind.UNAUTHORIZED:
        return (
            f"{label} API key is not configured or invalid. "
            f"Please check {settings.key_env} in your environment variables."
        )

    if failure.kind is ErrorKind.QUOTA_EXCEEDED:
        where = f" at {settings.billing_url}" if settings.billing_url else ""
        return (
            f"⚠️ Your {label} account has exceeded its quota. "
            f"Please add credits{where} to continue using the AI features."
        )

    if failure.kind is ErrorKind.RATE_LIMITED:
        return RATE_LIMIT_MESSAGE

    return f"Error: {failure.detail or 'Unknown error'}. Please try again."
