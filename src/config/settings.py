"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file). Settings are built once at startup and passed explicitly
to whatever needs them; nothing reads the environment behind the caller's back.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    catalog_csv_path: str = Field(alias="CATALOG_CSV_PATH")

    llm_api_key: str = Field(alias="LLM_API_KEY")
    llm_api_base: str = Field(default="https://api.openai.com/v1", alias="LLM_API_BASE")
    llm_model: str = Field(default="gpt-4o-mini", alias="LLM_MODEL")
    llm_timeout_s: float = Field(default=30.0, alias="LLM_TIMEOUT_S")

    max_result_count: int = Field(default=10, alias="MAX_RESULT_COUNT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("catalog_csv_path", "llm_api_key")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("llm_timeout_s")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """The generation call must always be bounded."""

        if value <= 0:
            raise ValueError("LLM_TIMEOUT_S must be positive")
        return value

    @field_validator("max_result_count")
    @classmethod
    def validate_max_result_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("MAX_RESULT_COUNT must be >= 1")
        return value


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is missing or invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
