"""Tests for environment settings validation."""

from __future__ import annotations

import pytest

from src.config.settings import Settings, load_settings
from src.intent.llm_parser import llm_config_from_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CATALOG_CSV_PATH",
        "LLM_API_KEY",
        "LLM_API_BASE",
        "LLM_MODEL",
        "LLM_TIMEOUT_S",
        "MAX_RESULT_COUNT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir("/")


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_CSV_PATH", " data/catalog.csv ")
    monkeypatch.setenv("LLM_API_KEY", "secret")
    monkeypatch.setenv("LLM_TIMEOUT_S", "12.5")

    settings = load_settings()

    assert settings.catalog_csv_path == "data/catalog.csv"
    assert settings.llm_model == "gpt-4o-mini"
    assert settings.max_result_count == 10

    config = llm_config_from_settings(settings)
    assert config.api_key == "secret"
    assert config.timeout_s == 12.5
    assert config.api_base == "https://api.openai.com/v1"


def test_missing_required_settings_raise_runtime_error() -> None:
    with pytest.raises(RuntimeError):
        load_settings()


@pytest.mark.parametrize(
    "overrides",
    [
        {"LLM_TIMEOUT_S": "0"},
        {"MAX_RESULT_COUNT": "0"},
        {"LLM_API_KEY": "   "},
    ],
)
def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch, overrides: dict[str, str]) -> None:
    monkeypatch.setenv("CATALOG_CSV_PATH", "catalog.csv")
    monkeypatch.setenv("LLM_API_KEY", "secret")
    for name, value in overrides.items():
        monkeypatch.setenv(name, value)

    with pytest.raises(RuntimeError):
        load_settings()


def test_settings_can_be_built_explicitly() -> None:
    settings = Settings(CATALOG_CSV_PATH="catalog.csv", LLM_API_KEY="k", MAX_RESULT_COUNT=4)

    assert settings.max_result_count == 4
