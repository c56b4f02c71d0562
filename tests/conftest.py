"""Shared fixtures for the campusnav test suite."""

import pytest

from campusnav.llm.provider_config import PROVIDERS
from tests.fakes import ScriptedAdapter, make_image_bytes


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove provider variables and run from an empty directory (no key files)."""
    monkeypatch.delenv("LLM_PROVIDER", raising=False)
    monkeypatch.delenv("LLM_TIMEOUT_SECONDS", raising=False)
    for name in PROVIDERS:
        prefix = name.upper()
        for suffix in ("_API_KEY", "_MODEL", "_VISION_MODEL", "_URL"):
            monkeypatch.delenv(f"{prefix}{suffix}", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def scripted_adapter() -> ScriptedAdapter:
    return ScriptedAdapter()
