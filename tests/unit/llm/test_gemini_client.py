"""
Unit tests for GeminiClient.
"""

import json

import httpx
import pytest

from llm_orchestration.llm.exceptions import LLMGenerationError, LLMRateLimitError
from llm_orchestration.llm.gemini_client import GeminiClient


BASE_URL = "https://gemini.test/v1beta"
DATE_LINE = "The current date and time is 2026-01-15T12:00:00+00:00"


def candidate(*texts):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": t} for t in texts]}}]}


@pytest.fixture
def captured():
    return []


@pytest.fixture
def gemini_client(captured, fixed_now):
    """Factory for a GeminiClient replying with a fixed envelope."""

    def _create(body, status_code: int = 200) -> GeminiClient:
        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(status_code, json=body)

        return GeminiClient(
            api_key="gemini-test",
            base_url=BASE_URL,
            timeout=5.0,
            transport=httpx.MockTransport(handler),
            now=lambda: fixed_now,
        )

    return _create


class TestRequestShape:

    @pytest.mark.asyncio
    async def test_endpoint_and_auth(self, gemini_client, captured, sample_messages):
        async with gemini_client(candidate("ok")) as client:
            await client.generate_text(sample_messages)

        request = captured[0]
        assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
        assert request.headers["x-goog-api-key"] == "gemini-test"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_system_messages_become_instruction(self, gemini_client, captured):
        messages = [
            {"role": "system", "content": "Rule one."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "system", "content": "Rule two."},
            {"role": "user", "content": "Bye"},
        ]

        async with gemini_client(candidate("ok")) as client:
            await client.generate_text(messages, temperature=0.6)

        payload = json.loads(captured[0].content)
        assert payload["systemInstruction"] == {
            "parts": [{"text": f"Rule one.\n\nRule two.\n\n{DATE_LINE}"}],
        }
        assert payload["contents"] == [
            {"role": "user", "parts": [{"text": "Hi"}]},
            {"role": "model", "parts": [{"text": "Hello"}]},
            {"role": "user", "parts": [{"text": "Bye"}]},
        ]
        config = payload["generationConfig"]
        assert config["temperature"] == 0.6
        assert config["topP"] == GeminiClient.TOP_P
        assert config["topK"] == GeminiClient.TOP_K
        assert config["maxOutputTokens"] == GeminiClient.MAX_OUTPUT_TOKENS
        assert config["responseMimeType"] == "text/plain"
        assert "responseSchema" not in config

    @pytest.mark.asyncio
    async def test_date_line_without_system_messages(self, gemini_client, captured):
        async with gemini_client(candidate("ok")) as client:
            await client.generate_text([{"role": "user", "content": "Hi"}])

        payload = json.loads(captured[0].content)
        assert payload["systemInstruction"]["parts"][0]["text"] == DATE_LINE

    @pytest.mark.asyncio
    async def test_structured_call_sends_cleaned_schema(
        self, gemini_client, captured, sample_messages, sample_schema
    ):
        async with gemini_client(candidate('{"urlPath": "/v1", "method": "GET"}')) as client:
            result = await client.generate_object(sample_messages, sample_schema)

        config = json.loads(captured[0].content)["generationConfig"]
        assert config["responseMimeType"] == "application/json"
        schema = config["responseSchema"]
        assert "$schema" not in schema
        assert schema["required"] == ["urlPath", "method"]
        assert schema["properties"]["method"] == {"type": "string", "enum": ["GET", "POST"]}
        assert result.response == {"urlPath": "/v1", "method": "GET"}
        assert "$schema" in sample_schema


class TestReplies:

    @pytest.mark.asyncio
    async def test_parts_are_joined(self, gemini_client, sample_messages):
        async with gemini_client(candidate("Hello, ", "world")) as client:
            result = await client.generate_text(sample_messages)

        assert result.response == "Hello, world"
        assert result.messages[-1].content == "Hello, world"

    @pytest.mark.asyncio
    async def test_fenced_reply_is_parsed(self, gemini_client, sample_messages):
        async with gemini_client(candidate('```json\n["a", "b"]\n```')) as client:
            result = await client.generate_object(sample_messages, {"type": "array", "items": {"type": "string"}})

        assert result.response == ["a", "b"]

    @pytest.mark.asyncio
    async def test_blocked_reply_raises_generation_error(self, gemini_client, sample_messages):
        body = {"promptFeedback": {"blockReason": "SAFETY"}}

        async with gemini_client(body) as client:
            with pytest.raises(LLMGenerationError) as exc_info:
                await client.generate_text(sample_messages)

        assert exc_info.value.details["prompt_feedback"] == {"blockReason": "SAFETY"}

    @pytest.mark.asyncio
    async def test_rate_limit(self, gemini_client, sample_messages):
        async with gemini_client({"error": {"code": 429}}, status_code=429) as client:
            with pytest.raises(LLMRateLimitError):
                await client.generate_text(sample_messages)

    @pytest.mark.asyncio
    async def test_scalar_root_reply_is_parsed(self, gemini_client, captured, sample_messages):
        async with gemini_client(candidate('"Stripe"')) as client:
            result = await client.generate_object(sample_messages, {"type": "string"})

        config = json.loads(captured[0].content)["generationConfig"]
        assert config["responseSchema"] == {"type": "string"}
        assert result.response == "Stripe"

    def test_honors_temperature_zero(self, gemini_client):
        client = gemini_client(candidate("ok"))
        assert client.is_deterministic(0) is True
        assert client.is_deterministic(0.6) is False
