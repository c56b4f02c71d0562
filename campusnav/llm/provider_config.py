"""Provider configuration for the LLM layer.

Architectural role:
    Centralizes provider selection, endpoint/model defaults and credential
    lookup. The result is an explicit `ProviderSettings` value that is handed to
    `campusnav.llm.client.build_adapter`; nothing downstream reads the
    environment directly.

Selection policy:
    1. `provider` argument, else the `LLM_PROVIDER` environment variable.
    2. Otherwise the first provider in `PROVIDERS` whose credential resolves.
    3. Otherwise `openai` with no credential, which every adapter reports as
       unconfigured without touching the network.

Determinism:
    Deterministic for a fixed process environment and key files. `.env` is
    loaded once at import time.

Failure behavior:
    Missing key material is represented as `api_key=None`. An unknown provider
    name raises `ValueError` at configuration time.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


DEFAULT_TIMEOUT_SECONDS = 120.0

# Endpoint, model and remediation defaults per provider, in auto-selection order.
PROVIDERS = {

    "openai": {
        "label": "OpenAI",
        "url": "https://api.openai.com/v1/chat/completions",
        "key_file": "config/openai.key",
        "text_model": "gpt-3.5-turbo",
        "vision_model": "gpt-4o",
        "billing_url": "https://platform.openai.com/account/billing",
    },

    "gemini": {
        "label": "Gemini",
        "url": "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
        "key_file": "config/gemini.key",
        "text_model": "gemini-1.5-flash",
        "vision_model": "gemini-1.5-pro",
        "billing_url": "https://console.cloud.google.com/billing",
    },

    "huggingface": {
        "label": "Hugging Face",
        "url": "https://api-inference.huggingface.co/models/{model}",
        "key_file": "config/huggingface.key",
        "text_model": "mistralai/Mistral-7B-Instruct-v0.2",
        "vision_model": "mistralai/Mistral-7B-Instruct-v0.2",
        "billing_url": "https://huggingface.co/settings/billing",
    },

}


@dataclass(frozen=True)
class ProviderSettings:
    """Injected configuration for one provider adapter instance.

    Attributes:
        provider: Key into `PROVIDERS`.
        api_key: Credential, or `None` when not configured.
        endpoint: URL or URL template (`{model}` placeholder allowed).
        text_model: Model used for text-only requests.
        vision_model: Model used when the request carries an image.
        timeout: Transport timeout in seconds.
    """

    provider: str
    api_key: str | None = field(default=None, repr=False)
    endpoint: str = ""
    text_model: str = ""
    vision_model: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def label(self) -> str:
        return PROVIDERS.get(self.provider, {}).get("label", self.provider)

    @property
    def key_env(self) -> str:
        return key_env_name(PROVIDERS.get(self.provider, {}).get("key_file") or self.provider)

    @property
    def billing_url(self) -> str | None:
        return PROVIDERS.get(self.provider, {}).get("billing_url")

    def model_for(self, has_image: bool) -> str:
        """Image-bearing requests use the vision model, text-only the cheaper one."""
        return self.vision_model if has_image else self.text_model


def key_env_name(path: str) -> str:
    """Map `config/openai.key` (or `openai`) to `OPENAI_API_KEY`."""
    return os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/openai.key` -> `OPENAI_API_KEY`).
        2. Raw file contents at `path`.

    Edge cases:
        - `None` path returns `None`.
        - Missing or empty file returns `None`.
    """
    if not path:
        return None
    env_value = os.getenv(key_env_name(path))
    if env_value:
        return env_value.strip()
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def _env_timeout() -> float:
    raw = os.getenv("LLM_TIMEOUT_SECONDS")
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def settings_for(provider: str) -> ProviderSettings:
    """Build settings for a named provider from defaults plus env overrides.

    Overrides: `<PROVIDER>_URL`, `<PROVIDER>_MODEL`, `<PROVIDER>_VISION_MODEL`,
    `LLM_TIMEOUT_SECONDS`.
    """
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown LLM provider: {provider}")

    config = PROVIDERS[provider]
    prefix = provider.upper()

    return ProviderSettings(
        provider=provider,
        api_key=load_key(config["key_file"]),
        endpoint=os.getenv(f"{prefix}_URL", config["url"]),
        text_model=os.getenv(f"{prefix}_MODEL", config["text_model"]),
        vision_model=os.getenv(f"{prefix}_VISION_MODEL", config["vision_model"]),
        timeout=_env_timeout(),
    )


def load_settings(provider: str | None = None) -> ProviderSettings:
    """Resolve the deployment's provider settings (see module docstring)."""
    requested = provider or os.getenv("LLM_PROVIDER")
    if requested:
        return settings_for(requested.strip().lower())

    for name in PROVIDERS:
        candidate = settings_for(name)
        if candidate.is_configured:
            return candidate

    return settings_for("openai")
