"""
Integration tests for the provider stack.

The mocked tests drive the full chain (factory -> cache -> vendor client ->
retry engine -> sanitizer) against httpx.MockTransport. The live test talks
to the real vendor and requires OPENAI_API_KEY.

Run with: pytest tests/integration/llm/test_provider_pipeline.py -v
"""

import json

import httpx
import pytest

from llm_orchestration.instructions import generate_instructions
from llm_orchestration.llm.factory import create_language_model
from llm_orchestration.llm.schema_adapter import RESULTS_KEY
from llm_orchestration.retry.engine import RetryEngine
from llm_orchestration.retry.exceptions import RetryExhausted
from llm_orchestration.retry.validators import non_empty_array


class ScriptedVendor:
    """MockTransport handler replying with scripted chat completions."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.payloads = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        reply = self.replies.pop(0)
        if isinstance(reply, int):
            return httpx.Response(reply, json={"error": {"message": "vendor error"}})
        return httpx.Response(
            200,
            json={"choices": [{"message": {"role": "assistant", "content": reply}}]},
        )


def wrapped(items):
    return json.dumps({RESULTS_KEY: items})


@pytest.mark.asyncio
async def test_instructions_end_to_end(test_settings, sample_systems):
    vendor = ScriptedVendor([
        wrapped([]),
        wrapped(["1. Retrieve Stripe customers with failed payments.", "**Integrations**"]),
    ])

    async with create_language_model(test_settings, transport=httpx.MockTransport(vendor)) as model:
        instructions = await generate_instructions(sample_systems, model, settings=test_settings)

    assert instructions == ["Retrieve Stripe customers with failed payments."]
    assert [p["temperature"] for p in vendor.payloads] == [0.0, 0.3]

    retry_messages = vendor.payloads[1]["messages"]
    assert retry_messages[-1]["role"] == "user"
    assert retry_messages[-1]["content"].startswith("The previous attempt failed with error:")


@pytest.mark.asyncio
async def test_deterministic_first_attempt_is_served_from_cache(test_settings, sample_systems):
    vendor = ScriptedVendor([wrapped(["Sync Stripe customers into MongoDB."])])

    async with create_language_model(test_settings, transport=httpx.MockTransport(vendor)) as model:
        first = await generate_instructions(sample_systems, model, settings=test_settings)
        second = await generate_instructions(sample_systems, model, settings=test_settings)

    assert first == second == ["Sync Stripe customers into MongoDB."]
    assert len(vendor.payloads) == 1


@pytest.mark.asyncio
async def test_vendor_errors_exhaust_retries(test_settings, sample_messages):
    vendor = ScriptedVendor([500, 503, 502])

    async with create_language_model(test_settings, transport=httpx.MockTransport(vendor)) as model:
        engine = RetryEngine(model, max_attempts=3)
        with pytest.raises(RetryExhausted) as exc_info:
            await engine.generate_object(
                sample_messages,
                {"type": "array", "items": {"type": "string"}},
                validator=non_empty_array,
            )

    assert exc_info.value.last_error.details["status"] == 502
    assert len(vendor.payloads) == 3
    assert model.text_cache.size == 0
    assert model.object_cache.size == 0


@pytest.mark.asyncio
async def test_live_instruction_generation(live_settings, sample_systems):
    async with create_language_model(live_settings) as model:
        instructions = await generate_instructions(sample_systems, model, settings=live_settings)

    assert len(instructions) > 0
    assert all(isinstance(item, str) and item for item in instructions)
