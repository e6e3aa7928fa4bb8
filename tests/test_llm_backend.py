"""Tests for the OpenAI-compatible generation backend (network calls are faked)."""

from __future__ import annotations

import io
import json
from typing import Any
from urllib.error import HTTPError, URLError

import pytest

from src.intent.llm_parser import (
    ChatCompletionsBackend,
    GenerationError,
    LLMConfig,
    MalformedOutputError,
    parse_generation_output,
)


class _FakeResponse(io.BytesIO):
    def __enter__(self) -> _FakeResponse:
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()


def _completion(content: Any) -> bytes:
    return json.dumps({"choices": [{"message": {"content": content}}]}).encode()


def test_backend_posts_chat_completion(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_urlopen(req: Any, timeout: float) -> _FakeResponse:
        captured["url"] = req.full_url
        captured["auth"] = req.get_header("Authorization")
        captured["body"] = json.loads(req.data)
        captured["timeout"] = timeout
        return _FakeResponse(_completion('  {"intent":"OTHER"}  '))

    monkeypatch.setattr("src.intent.llm_parser.urlopen", _fake_urlopen)
    backend = ChatCompletionsBackend(
        LLMConfig(api_key="secret", model="m-1", api_base="https://llm.example/v1/", timeout_s=5)
    )

    text = backend.complete("SYSTEM", "hola")

    assert text == '{"intent":"OTHER"}'
    assert captured["url"] == "https://llm.example/v1/chat/completions"
    assert captured["auth"] == "Bearer secret"
    assert captured["timeout"] == 5
    assert captured["body"]["model"] == "m-1"
    assert captured["body"]["temperature"] == 0
    assert captured["body"]["messages"] == [
        {"role": "system", "content": "SYSTEM"},
        {"role": "user", "content": "hola"},
    ]


@pytest.mark.parametrize(
    "error",
    [
        HTTPError("https://llm.example", 500, "boom", None, None),  # type: ignore[arg-type]
        URLError("unreachable"),
        TimeoutError("slow"),
    ],
)
def test_backend_transport_errors(monkeypatch: pytest.MonkeyPatch, error: Exception) -> None:
    def _fake_urlopen(_req: Any, timeout: float) -> _FakeResponse:
        raise error

    monkeypatch.setattr("src.intent.llm_parser.urlopen", _fake_urlopen)

    with pytest.raises(GenerationError):
        ChatCompletionsBackend(LLMConfig(api_key="k")).complete("S", "u")


@pytest.mark.parametrize("body", [b"not json", b'{"choices": []}', _completion(None)])
def test_backend_unexpected_response_shape(monkeypatch: pytest.MonkeyPatch, body: bytes) -> None:
    monkeypatch.setattr(
        "src.intent.llm_parser.urlopen",
        lambda _req, timeout: _FakeResponse(body),
    )

    with pytest.raises(GenerationError):
        ChatCompletionsBackend(LLMConfig(api_key="k")).complete("S", "u")


def test_parse_generation_output_requires_single_object() -> None:
    assert parse_generation_output('{"intent": "SEARCH"}') == {"intent": "SEARCH"}

    for text in ("", "SEARCH", '{"intent": "SEARCH"} gracias', '["SEARCH"]', "```"):
        with pytest.raises(MalformedOutputError):
            parse_generation_output(text)
