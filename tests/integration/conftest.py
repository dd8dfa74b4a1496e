"""Integration test fixtures (vendor credentials and prerequisites).

Live vendor tests are skipped unless the matching API key is exported.
"""

import os

import pytest

from llm_orchestration.config import Settings


@pytest.fixture(scope="session")
def check_openai_key():
    """Skip unless OPENAI_API_KEY is set in the environment."""
    if not os.environ.get("OPENAI_API_KEY"):
        pytest.skip("OPENAI_API_KEY not set")


@pytest.fixture
def live_settings(check_openai_key) -> Settings:
    """Process settings pointed at the real OpenAI API.

    Requires OPENAI_API_KEY (checked by check_openai_key fixture).
    """
    return Settings(LLM_PROVIDER="openai", LLM_TIMEOUT=60.0)
