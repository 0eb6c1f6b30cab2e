"""Tests for the chat completion client."""
from __future__ import annotations

import json

import httpx
import pytest

from app.infra.llm_client import ChatCompletionClient, CompletionError, RateLimitedError


def _client(handler) -> ChatCompletionClient:
    return ChatCompletionClient(
        "sk-test",
        model="gpt-test",
        base_url="https://llm.example.test/v1/",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  Xin chào Anh/Chị  "}}]})

    text = await _client(handler).complete("SYSTEM", "USER", temperature=0.1, max_tokens=55)

    assert text == "Xin chào Anh/Chị"
    request = seen[0]
    assert str(request.url) == "https://llm.example.test/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body["model"] == "gpt-test"
    assert body["messages"] == [
        {"role": "system", "content": "SYSTEM"},
        {"role": "user", "content": "USER"},
    ]
    assert body["temperature"] == 0.1
    assert body["max_tokens"] == 55


@pytest.mark.asyncio
async def test_model_override_per_call():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    await _client(handler).complete("s", "u", model="gpt-other")
    assert seen[0]["model"] == "gpt-other"


@pytest.mark.asyncio
async def test_429_raises_rate_limited():
    client = _client(lambda request: httpx.Response(429, json={"error": "slow down"}))
    with pytest.raises(RateLimitedError):
        await client.complete("s", "u")


@pytest.mark.asyncio
async def test_other_http_errors_are_generic_failures():
    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(CompletionError) as exc:
        await client.complete("s", "u")
    assert not isinstance(exc.value, RateLimitedError)


@pytest.mark.asyncio
async def test_missing_choices_is_a_failure():
    client = _client(lambda request: httpx.Response(200, json={"choices": []}))
    with pytest.raises(CompletionError):
        await client.complete("s", "u")


@pytest.mark.asyncio
async def test_null_content_returns_empty_text():
    client = _client(lambda request: httpx.Response(200, json={"choices": [{"message": {"content": None}}]}))
    assert await client.complete("s", "u") == ""


def test_api_key_is_required():
    with pytest.raises(ValueError):
        ChatCompletionClient("")
