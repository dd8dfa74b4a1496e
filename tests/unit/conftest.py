"""Unit test fixtures (fakes and stubs).

Provides in-memory stand-ins so unit tests never reach a vendor API.
"""

import json
from typing import Any

import pytest

from llm_orchestration.llm.base_client import LanguageModel
from llm_orchestration.models.enums import MessageRole
from llm_orchestration.models.llm_models import (
    LLMObjectResponse,
    LLMResponse,
    Message,
    coerce_messages,
)


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedLanguageModel(LanguageModel):
    """
    LanguageModel returning scripted replies in order.

    Each script item is either a value (returned as the response) or an
    exception instance (raised). Every call is recorded as a dict with
    kind, messages, schema and temperature.
    """

    def __init__(self, script: list[Any]):
        self.script = list(script)
        self.calls: list[dict[str, Any]] = []

    def _next(self) -> Any:
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def generate_text(self, messages, temperature: float = 0.0) -> LLMResponse:
        history = coerce_messages(messages)
        self.calls.append({"kind": "text", "messages": history, "schema": None, "temperature": temperature})
        reply = self._next()
        return LLMResponse(
            response=reply,
            messages=[*history, Message(role=MessageRole.ASSISTANT, content=reply)],
        )

    async def generate_object(self, messages, schema, temperature: float = 0.0) -> LLMObjectResponse:
        history = coerce_messages(messages)
        self.calls.append({"kind": "object", "messages": history, "schema": schema, "temperature": temperature})
        value = self._next()
        return LLMObjectResponse(
            response=value,
            messages=[*history, Message(role=MessageRole.ASSISTANT, content=json.dumps(value))],
        )

    @property
    def temperatures(self) -> list[float]:
        return [call["temperature"] for call in self.calls]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scripted_model():
    """Factory fixture to create a ScriptedLanguageModel.
    
    Usage:
        def test_something(scripted_model):
            model = scripted_model([["a"], ValueError("boom")])
    """
    def _create(script: list[Any]) -> ScriptedLanguageModel:
        return ScriptedLanguageModel(script)

    return _create
