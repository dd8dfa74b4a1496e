"""Shared test fixtures and configuration for all tests."""

from datetime import datetime, timezone

import pytest

from llm_orchestration.config import Settings
from llm_orchestration.models.llm_models import Message, SystemDefinition


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults.
    
    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.LLM_PROVIDER = "gemini"
    """
    return Settings(
        APP_NAME="LLM Orchestration Core (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        LLM_PROVIDER="openai",
        LLM_TIMEOUT=5.0,
        OPENAI_API_KEY="sk-test",
        OPENAI_MODEL="gpt-4o",
        OPENAI_BASE_URL="https://api.openai.test/v1",
        GEMINI_API_KEY="gemini-test",
        GEMINI_MODEL="gemini-2.5-flash",
        GEMINI_BASE_URL="https://gemini.test/v1beta",
        LLM_CACHE_ENABLED=True,
        LLM_CACHE_TTL=3_600_000,
        LLM_CACHE_SIZE=1000,
    )


@pytest.fixture
def fixed_now() -> datetime:
    """Frozen timestamp used for the date context line."""
    return datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_messages() -> list[dict]:
    """A short conversation as plain role/content dicts."""
    return [
        {"role": "system", "content": "You generate API configurations."},
        {"role": "user", "content": "List the endpoints of the Stripe customers API."},
    ]


@pytest.fixture
def sample_message_objects(sample_messages) -> list[Message]:
    return [Message.model_validate(m) for m in sample_messages]


@pytest.fixture
def sample_schema() -> dict:
    """Object schema with one required and one optional property."""
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {
            "urlPath": {"type": "string"},
            "method": {"type": "string", "enum": ["GET", "POST"]},
        },
        "required": ["urlPath"],
    }


@pytest.fixture
def sample_systems() -> list[SystemDefinition]:
    return [
        SystemDefinition(id="stripe", url_host="https://api.stripe.com", url_path="/v1"),
        SystemDefinition(id="mongodb", url_host="mongodb://db.internal:27017"),
    ]
