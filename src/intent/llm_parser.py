"""Generation backend client and output parsing.

The backend is only allowed to produce **QueryPlan JSON**: one JSON object, nothing around it.
The decoded object is validated by `src.intent.schema`; this module only guarantees that the
text parses.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from src.config.settings import Settings

PROMPT_VERSION = "v1"


class GenerationError(RuntimeError):
    """Raised when the generation backend call fails."""


class MalformedOutputError(ValueError):
    """Raised when the backend response is not a single parsable JSON object."""


class GenerationBackend(Protocol):
    """Anything that turns a system instruction plus a user message into text."""

    def complete(self, system_prompt: str, user_text: str) -> str:
        ...


@dataclass(frozen=True)
class LLMConfig:
    """Configuration for the OpenAI-style Chat Completions API call."""

    api_key: str
    model: str = "gpt-4o-mini"
    api_base: str = "https://api.openai.com/v1"
    timeout_s: float = 30.0


def llm_config_from_settings(settings: Settings) -> LLMConfig:
    """Build the backend config from validated application settings."""

    return LLMConfig(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        api_base=settings.llm_api_base,
        timeout_s=settings.llm_timeout_s,
    )


def load_prompt(version: str = PROMPT_VERSION) -> str:
    """Read the versioned planner instruction shipped next to this module."""

    prompt_path = Path(__file__).resolve().parent / f"prompt_planner_{version}.md"
    return prompt_path.read_text(encoding="utf-8")


def _strip_code_fences(text: str) -> str:
    value = (text or "").strip()
    # Only a response wholly wrapped in a fence is unwrapped.
    if value.startswith("```") and value.endswith("```") and len(value) >= 6:
        value = value[3:-3].strip()
        value = value.removeprefix("json").strip()
    return value


def parse_generation_output(text: str) -> dict[str, Any]:
    """Decode backend text into a JSON object.

    There is no partial extraction: prose before or after the JSON makes the whole output
    malformed.
    """

    try:
        decoded = json.loads(_strip_code_fences(text))
    except json.JSONDecodeError as exc:
        raise MalformedOutputError("Backend did not return valid JSON") from exc

    if not isinstance(decoded, dict):
        raise MalformedOutputError("Backend JSON is not an object")
    return decoded


def _chat_completions_url(api_base: str) -> str:
    return api_base.rstrip("/") + "/chat/completions"


class ChatCompletionsBackend:
    """OpenAI-compatible `/v1/chat/completions` backend (temperature 0, single call)."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    def complete(self, system_prompt: str, user_text: str) -> str:
        config = self._config
        payload = {
            "model": config.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
        }

        req = Request(
            _chat_completions_url(config.api_base),
            method="POST",
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
            data=json.dumps(payload).encode(),
        )

        try:
            with urlopen(req, timeout=config.timeout_s) as resp:  # noqa: S310 (configured API base)
                body = resp.read()
        except HTTPError as exc:
            raise GenerationError(f"LLM HTTP error: {exc.code}") from exc
        except (URLError, TimeoutError) as exc:
            raise GenerationError("LLM connection error") from exc

        try:
            decoded = json.loads(body)
            content = decoded["choices"][0]["message"]["content"]
        except Exception as exc:  # noqa: BLE001
            raise GenerationError("Unexpected LLM response format") from exc

        if not isinstance(content, str):
            raise GenerationError("LLM response missing content")
        return content.strip()
