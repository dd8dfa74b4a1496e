"""
Unit tests for instruction suggestion.
"""

import json

import pytest

from llm_orchestration.instructions import (
    INSTRUCTIONS_SCHEMA,
    INSTRUCTIONS_SYSTEM_PROMPT,
    build_instruction_messages,
    generate_instructions,
)
from llm_orchestration.models.enums import MessageRole
from llm_orchestration.retry.exceptions import RetryExhausted


class TestBuildInstructionMessages:

    def test_prompt_lists_systems_as_json(self, sample_systems):
        system, user = build_instruction_messages(sample_systems)

        assert system.role is MessageRole.SYSTEM
        assert system.content == INSTRUCTIONS_SYSTEM_PROMPT
        assert user.role is MessageRole.USER
        assert user.content.startswith("Systems: ")

        listed = json.loads(user.content[len("Systems: "):])
        assert [s["id"] for s in listed] == ["stripe", "mongodb"]
        assert listed[0]["url_host"] == "https://api.stripe.com"


class TestGenerateInstructions:

    @pytest.mark.asyncio
    async def test_returns_sanitized_suggestions(self, scripted_model, sample_systems, test_settings):
        model = scripted_model([[
            "**Stripe**",
            "1. Retrieve all Stripe customers created this week.",
            "- Find MongoDB orders with status 'pending'.",
        ]])

        instructions = await generate_instructions(sample_systems, model, settings=test_settings)

        assert instructions == [
            "Retrieve all Stripe customers created this week.",
            "Find MongoDB orders with status 'pending'.",
        ]
        assert model.calls[0]["schema"] == INSTRUCTIONS_SCHEMA
        assert model.temperatures == [0.0]

    @pytest.mark.asyncio
    async def test_empty_replies_are_retried(self, scripted_model, sample_systems, test_settings):
        model = scripted_model([[], ["## Suggestions"], ["Sync Stripe customers into MongoDB."]])

        instructions = await generate_instructions(sample_systems, model, settings=test_settings)

        assert instructions == ["Sync Stripe customers into MongoDB."]
        assert model.temperatures == [0.0, 0.3, 0.6]

    @pytest.mark.asyncio
    async def test_gives_up_after_configured_attempts(self, scripted_model, sample_systems, test_settings):
        test_settings.INSTRUCTION_MAX_ATTEMPTS = 2
        model = scripted_model([[], []])

        with pytest.raises(RetryExhausted) as exc_info:
            await generate_instructions(sample_systems, model, settings=test_settings)

        assert exc_info.value.retry_metadata.total_attempts == 2
        assert len(model.calls) == 2
