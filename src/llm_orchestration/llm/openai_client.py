"""
OpenAI client (strict-mode structured output family).

Communicates with the Chat Completions API using httpx. Supports:
- Free-text generation
- Structured output via response_format json_schema with strict=true
- Date context injected as a leading system message
"""

from typing import Any, Callable, Optional
from datetime import datetime

import httpx
import structlog

from llm_orchestration.llm.base_client import BaseLLMClient
from llm_orchestration.llm.exceptions import LLMGenerationError
from llm_orchestration.llm.schema_adapter import (
    AdaptedSchema,
    add_nullable_to_optional,
    enforce_strict_schema,
)
from llm_orchestration.models.enums import ProviderName
from llm_orchestration.models.llm_models import Message


logger = structlog.get_logger(__name__)


class OpenAIClient(BaseLLMClient):
    """
    OpenAI-specific client.

    API Endpoints:
    - POST /chat/completions

    Strict structured outputs cannot express optional properties or
    non-object roots, so schemas are widened (optional -> nullable),
    strictified and, when needed, wrapped under a synthetic root key.
    """

    provider = ProviderName.OPENAI

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(api_key, model, base_url, timeout, transport=transport, now=now)

    @property
    def supports_temperature(self) -> bool:
        """Reasoning models (o1, o3, ...) reject the temperature parameter."""
        return not self.model.startswith("o")

    def is_deterministic(self, temperature: float) -> bool:
        # Temperature is not sent to reasoning models; the vendor default applies
        return self.supports_temperature and temperature == 0

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def adapt_schema(self, schema: dict[str, Any]) -> AdaptedSchema:
        return enforce_strict_schema(add_nullable_to_optional(schema))

    def _build_request(
        self,
        messages: list[Message],
        temperature: float,
        schema: Optional[dict[str, Any]],
        structured: bool,
    ) -> tuple[str, dict[str, Any]]:
        """
        Build POST /chat/completions payload:
        {
            "model": "gpt-4o",
            "messages": [{"role": "system", "content": "The current date..."}, ...],
            "temperature": 0,
            "response_format": {"type": "json_schema", "json_schema": {...}}
        }
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.date_context()},
                *(message.model_dump(mode="json") for message in messages),
            ],
        }

        if self.supports_temperature:
            payload["temperature"] = temperature

        if structured:
            if schema is not None:
                payload["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {"name": "response", "strict": True, "schema": schema},
                }
            else:
                payload["response_format"] = {"type": "json_object"}

        return "/chat/completions", payload

    def _extract_content(self, data: dict[str, Any]) -> str:
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMGenerationError(
                "Unexpected response shape from openai",
                details={"response": str(data)[:500]},
            ) from e

        content = message.get("content")
        if content is None:
            raise LLMGenerationError(
                "Empty response from openai",
                details={"refusal": message.get("refusal")},
            )
        return content
