"""
Gemini client (schema-stripping structured output family).

Communicates with the generateContent REST API using httpx. System
messages become the system instruction (with the date context appended),
assistant turns map to the "model" role, and structured calls send a
cleaned responseSchema with responseMimeType application/json.
"""

from typing import Any, Callable, Optional
from datetime import datetime

import httpx
import structlog

from llm_orchestration.llm.base_client import BaseLLMClient
from llm_orchestration.llm.exceptions import LLMGenerationError
from llm_orchestration.llm.schema_adapter import AdaptedSchema, clean_schema_for_gemini
from llm_orchestration.models.enums import MessageRole, ProviderName
from llm_orchestration.models.llm_models import Message


logger = structlog.get_logger(__name__)


class GeminiClient(BaseLLMClient):
    """
    Gemini-specific client.

    API Endpoints:
    - POST /models/{model}:generateContent
    """

    provider = ProviderName.GEMINI

    TOP_P = 0.95
    TOP_K = 64
    MAX_OUTPUT_TOKENS = 65536

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(api_key, model, base_url, timeout, transport=transport, now=now)

    def _auth_headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def adapt_schema(self, schema: dict[str, Any]) -> AdaptedSchema:
        return AdaptedSchema(schema=clean_schema_for_gemini(schema), wrapped=False)

    def _convert_history(self, messages: list[Message]) -> tuple[str, list[dict[str, Any]]]:
        """Split messages into (system instruction, contents)."""
        system_parts: list[str] = []
        contents: list[dict[str, Any]] = []

        for message in messages:
            if message.role is MessageRole.SYSTEM:
                system_parts.append(message.content)
                continue
            role = "model" if message.role is MessageRole.ASSISTANT else "user"
            contents.append({"role": role, "parts": [{"text": message.content}]})

        system_parts.append(self.date_context())
        return "\n\n".join(system_parts), contents

    def _build_request(
        self,
        messages: list[Message],
        temperature: float,
        schema: Optional[dict[str, Any]],
        structured: bool,
    ) -> tuple[str, dict[str, Any]]:
        system_instruction, contents = self._convert_history(messages)

        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "topP": self.TOP_P,
            "topK": self.TOP_K,
            "maxOutputTokens": self.MAX_OUTPUT_TOKENS,
            "responseMimeType": "application/json" if structured else "text/plain",
        }
        if structured and schema is not None:
            generation_config["responseSchema"] = schema

        payload = {
            "systemInstruction": {"parts": [{"text": system_instruction}]},
            "contents": contents,
            "generationConfig": generation_config,
        }
        return f"/models/{self.model}:generateContent", payload

    def _extract_content(self, data: dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMGenerationError(
                "Empty response from gemini",
                details={
                    "prompt_feedback": data.get("promptFeedback") if isinstance(data, dict) else None,
                    "response": str(data)[:500],
                },
            ) from e

        return "".join(part.get("text", "") for part in parts)
