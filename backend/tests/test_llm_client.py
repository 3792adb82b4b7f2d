"""
Unit tests for the chat-completions client, using httpx.MockTransport.
"""
import json

import httpx
import pytest

from ecoswap.core.circuit_breaker import CircuitBreakerOpenError
from ecoswap.services.ai.llm_client import (
    LLMClient,
    LLMNotConfiguredError,
    extract_message_content,
)


def _client(handler, api_key="test-key") -> LLMClient:
    return LLMClient(
        api_base="https://llm.example/v1/",
        api_key=api_key,
        model="test-model",
        timeout_seconds=1.0,
        transport=httpx.MockTransport(handler),
    )


MESSAGES = [{"role": "user", "content": "hello"}]


@pytest.mark.asyncio
async def test_chat_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": '{"reasoning": "ok"}'}}],
                "usage": {"prompt_tokens": 12, "completion_tokens": 8},
            },
        )

    client = _client(handler)
    response = await client.chat("copywriter", MESSAGES, response_format={"type": "json_object"})

    assert extract_message_content(response) == '{"reasoning": "ok"}'
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["max_tokens"] == 1024
    assert seen["body"]["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_chat_http_error_raises():
    client = _client(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(httpx.HTTPStatusError):
        await client.chat("copywriter", MESSAGES)


@pytest.mark.asyncio
async def test_chat_non_object_body_raises():
    client = _client(lambda request: httpx.Response(200, json=["not", "an", "object"]))

    with pytest.raises(ValueError):
        await client.chat("copywriter", MESSAGES)


@pytest.mark.asyncio
async def test_missing_key_raises_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    client = _client(handler, api_key=None)

    assert not client.is_configured
    with pytest.raises(LLMNotConfiguredError):
        await client.chat("copywriter", MESSAGES)
    assert calls == []


@pytest.mark.asyncio
async def test_circuit_opens_after_repeated_failures():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    client = _client(handler)
    for _ in range(4):
        with pytest.raises(httpx.HTTPStatusError):
            await client.chat("copywriter", MESSAGES)

    with pytest.raises(CircuitBreakerOpenError):
        await client.chat("copywriter", MESSAGES)
    assert len(calls) == 4
    assert client.describe()["circuit_breaker"]["state"] == "open"


def test_describe_hides_key():
    client = _client(lambda request: httpx.Response(200, json={}))
    details = client.describe()

    assert details["configured"] is True
    assert details["model"] == "test-model"
    assert "test-key" not in json.dumps(details)


@pytest.mark.parametrize(
    "response",
    [
        {},
        {"choices": []},
        {"choices": ["text"]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": "text"}]},
    ],
)
def test_extract_message_content_malformed(response):
    assert extract_message_content(response) == ""
