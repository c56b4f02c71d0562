"""Tests for provider settings resolution."""

import pytest

from campusnav.llm.provider_config import (
    DEFAULT_TIMEOUT_SECONDS,
    key_env_name,
    load_key,
    load_settings,
    settings_for,
)


class TestLoadKey:

    def test_env_variable_wins(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", " sk-env ")
        (clean_env / "config").mkdir()
        (clean_env / "config" / "openai.key").write_text("sk-file")

        assert load_key("config/openai.key") == "sk-env"

    def test_reads_key_file(self, clean_env) -> None:
        (clean_env / "config").mkdir()
        (clean_env / "config" / "gemini.key").write_text("gm-file\n")

        assert load_key("config/gemini.key") == "gm-file"

    def test_missing_returns_none(self, clean_env) -> None:
        assert load_key("config/openai.key") is None
        assert load_key(None) is None

    def test_key_env_name(self) -> None:
        assert key_env_name("config/huggingface.key") == "HUGGINGFACE_API_KEY"
        assert key_env_name("openai") == "OPENAI_API_KEY"


class TestLoadSettings:

    def test_no_credentials_defaults_to_unconfigured_openai(self, clean_env) -> None:
        settings = load_settings()

        assert settings.provider == "openai"
        assert not settings.is_configured
        assert settings.key_env == "OPENAI_API_KEY"

    def test_first_configured_provider_is_selected(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "gm-key")

        settings = load_settings()

        assert settings.provider == "gemini"
        assert settings.api_key == "gm-key"
        assert settings.text_model == "gemini-1.5-flash"

    def test_explicit_provider_env(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-key")
        monkeypatch.setenv("LLM_PROVIDER", "HuggingFace")

        settings = load_settings()

        assert settings.provider == "huggingface"
        assert not settings.is_configured

    def test_explicit_argument_overrides_env(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("LLM_PROVIDER", "gemini")

        assert load_settings("openai").provider == "openai"

    def test_unknown_provider_raises(self, clean_env) -> None:
        with pytest.raises(ValueError):
            load_settings("nope")

    def test_env_overrides(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("OPENAI_URL", "http://localhost:8080/v1/chat/completions")
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "30")

        settings = settings_for("openai")

        assert settings.text_model == "gpt-4o-mini"
        assert settings.vision_model == "gpt-4o"
        assert settings.endpoint == "http://localhost:8080/v1/chat/completions"
        assert settings.timeout == 30.0

    def test_bad_timeout_falls_back(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "soon")

        assert settings_for("openai").timeout == DEFAULT_TIMEOUT_SECONDS

    def test_model_for(self, clean_env) -> None:
        settings = settings_for("openai")

        assert settings.model_for(has_image=True) == "gpt-4o"
        assert settings.model_for(has_image=False) == "gpt-3.5-turbo"

    def test_repr_hides_key(self, clean_env, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

        assert "sk-secret" not in repr(load_settings())
