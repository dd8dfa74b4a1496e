"""
Provider interface and shared vendor-client plumbing.

LanguageModel is the capability set every caller consumes (free-text and
schema-constrained generation). BaseLLMClient implements it once for HTTP
vendors: concrete clients only describe their wire format (payload, auth
headers, reply extraction, schema dialect). Caching is layered on top by
CachedLanguageModel, never inside a vendor client.
"""

import json
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

import httpx
import structlog

from llm_orchestration.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMGenerationError,
    LLMParseError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from llm_orchestration.llm.parsing import parse_json_response
from llm_orchestration.llm.schema_adapter import AdaptedSchema, unwrap_result
from llm_orchestration.models.enums import MessageRole, ProviderName
from llm_orchestration.models.llm_models import (
    LLMObjectResponse,
    LLMResponse,
    Message,
    MessageLike,
    coerce_messages,
)
from llm_orchestration.monitoring.metrics import llm_latency_seconds, llm_requests_total


logger = structlog.get_logger(__name__)


class LanguageModel(ABC):
    """
    Uniform capability set over interchangeable model backends.

    Both operations return the input history extended with the assistant
    reply; the caller's history is never modified in place.
    """

    @abstractmethod
    async def generate_text(
        self,
        messages: Iterable[MessageLike],
        temperature: float = 0.0,
    ) -> LLMResponse:
        """
        Generate a free-text reply.

        Raises:
            LLMClientError subclass when the backend call fails
        """
        pass

    @abstractmethod
    async def generate_object(
        self,
        messages: Iterable[MessageLike],
        schema: Optional[dict[str, Any]],
        temperature: float = 0.0,
    ) -> LLMObjectResponse:
        """
        Generate a structured reply conforming to a JSON Schema.

        Raises:
            LLMParseError: The reply could not be parsed into a value
            LLMClientError subclass when the backend call fails
        """
        pass

    def is_deterministic(self, temperature: float) -> bool:
        """
        True when a call at this temperature reproduces its result.

        Only deterministic calls may be cached. Backends that ignore the
        requested temperature override this.
        """
        return temperature == 0

    async def close(self):
        """Release held connections. Default implementation does nothing."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class BaseLLMClient(LanguageModel):
    """
    Shared implementation for hosted model APIs reached over HTTPS.

    Responsibilities:
    - Own a pooled httpx.AsyncClient with the configured deadline
    - Inject the current date/time line into every call
    - Log call intent and completion latency, record metrics
    - Map transport failures onto the LLMClientError hierarchy
    - Parse structured replies and append the assistant turn to the history

    Subclasses implement:
    - _auth_headers(): vendor credential headers
    - _build_request(): endpoint path and JSON payload
    - _extract_content(): reply text from the vendor envelope
    - adapt_schema(): vendor schema dialect
    """

    provider: ProviderName

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize base client.

        Args:
            api_key: Vendor credential, passed through unmodified
            model: Model identifier addressed on every call
            base_url: API root (e.g. https://api.openai.com/v1)
            timeout: Per-call deadline in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            now: Clock for the date context line (default: UTC now)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            model=self.model,
            base_url=self.base_url,
            timeout=timeout,
        )

    # === Vendor hooks ===

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Credential headers sent with every request."""
        pass

    @abstractmethod
    def _build_request(
        self,
        messages: list[Message],
        temperature: float,
        schema: Optional[dict[str, Any]],
        structured: bool,
    ) -> tuple[str, dict[str, Any]]:
        """Return (endpoint path, JSON payload) for one call."""
        pass

    @abstractmethod
    def _extract_content(self, data: dict[str, Any]) -> str:
        """Pull the reply text out of the vendor response envelope."""
        pass

    @abstractmethod
    def adapt_schema(self, schema: dict[str, Any]) -> AdaptedSchema:
        """Transform a caller schema into this vendor's dialect (on a copy)."""
        pass

    # === Provider interface ===

    async def generate_text(
        self,
        messages: Iterable[MessageLike],
        temperature: float = 0.0,
    ) -> LLMResponse:
        history = coerce_messages(messages)
        content = await self._dispatch(history, temperature, schema=None, kind="text")
        return LLMResponse(response=content, messages=self._extend(history, content))

    async def generate_object(
        self,
        messages: Iterable[MessageLike],
        schema: Optional[dict[str, Any]],
        temperature: float = 0.0,
    ) -> LLMObjectResponse:
        history = coerce_messages(messages)
        adapted = self.adapt_schema(schema) if schema is not None else None

        content = await self._dispatch(
            history,
            temperature,
            schema=adapted.schema if adapted else None,
            kind="object",
        )

        try:
            value = parse_json_response(content)
        except LLMParseError:
            llm_requests_total.labels(
                provider=self.provider.value, kind="object", outcome="parse_error"
            ).inc()
            raise

        value = unwrap_result(value, adapted.wrapped if adapted else False)
        return LLMObjectResponse(response=value, messages=self._extend(history, content))

    # === Shared plumbing ===

    def date_context(self) -> str:
        """Temporal anchor injected into every call."""
        return f"The current date and time is {self._now().isoformat()}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers=self._auth_headers(),
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient", client_class=self.__class__.__name__)
        return self._client

    async def _dispatch(
        self,
        history: list[Message],
        temperature: float,
        schema: Optional[dict[str, Any]],
        kind: str,
    ) -> str:
        path, payload = self._build_request(history, temperature, schema, structured=kind == "object")

        logger.debug(
            f"{self.provider.value} API call",
            kind=kind,
            model=self.model,
            approx_tokens=_estimate_tokens(history),
            temperature=temperature,
        )

        start_time = time.perf_counter()
        try:
            data = await self._post(path, payload)
            content = self._extract_content(data)
        except Exception as e:
            logger.error(
                f"{self.provider.value} API error",
                kind=kind,
                model=self.model,
                error=str(e),
                error_type=type(e).__name__,
            )
            llm_requests_total.labels(
                provider=self.provider.value, kind=kind, outcome="transport_error"
            ).inc()
            raise

        latency = time.perf_counter() - start_time
        llm_latency_seconds.labels(provider=self.provider.value, kind=kind).observe(latency)
        llm_requests_total.labels(provider=self.provider.value, kind=kind, outcome="success").inc()
        logger.debug(
            f"{self.provider.value} response received",
            kind=kind,
            model=self.model,
            latency_ms=int(latency * 1000),
        )
        return content

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON envelope."""
        try:
            client = await self._get_client()
            response = await client.post(path, json=payload)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout, "model": self.model},
            ) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            details = {"status": status_code, "error": e.response.text[:1000], "model": self.model}
            if status_code == 429:
                raise LLMRateLimitError(f"Rate limited by {self.provider.value}", details=details) from e
            if status_code in (401, 403):
                raise LLMAuthenticationError(
                    f"{self.provider.value} rejected credentials: {status_code}", details=details
                ) from e
            raise LLMGenerationError(
                f"{self.provider.value} error: {status_code}", details=details
            ) from e

        except httpx.TransportError as e:
            raise LLMConnectionError(
                f"Network error: {str(e)}",
                details={"error_type": type(e).__name__},
            ) from e

        except json.JSONDecodeError as e:
            raise LLMGenerationError(
                f"Invalid JSON envelope from {self.provider.value}",
                details={"parse_error": str(e)},
            ) from e

    @staticmethod
    def _extend(history: list[Message], content: str) -> list[Message]:
        return [*history, Message(role=MessageRole.ASSISTANT, content=content)]

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed LLM client connection", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"model={self.model}, "
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )


def _estimate_tokens(messages: list[Message]) -> int:
    """Rough token count (~4 characters per token) for call-intent logging."""
    serialized = json.dumps([m.model_dump(mode="json") for m in messages])
    return len(serialized) // 4
