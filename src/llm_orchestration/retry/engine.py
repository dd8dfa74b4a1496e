"""
Retry-with-regeneration engine.

Drives a model call to a valid result despite transient failures and
structurally invalid output:

    1. Attempt 0 runs at temperature 0 (cacheable).
    2. The reply is checked by the caller's validator.
    3. On any failure (transport, parse, validation) a user message with the
       error text is appended and the next attempt runs at
       min(step * attempt, cap).
    4. After max_attempts failures, RetryExhausted is raised, chained to the
       last error. A degraded result is never returned in place of a real one.

Attempts are strictly sequential: each one's history depends on the
previous one's error.

Usage:
    engine = RetryEngine(model, max_attempts=3)
    value, metadata = await engine.generate_object(messages, schema, validator=non_empty_array)
"""

import time
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

import structlog

from llm_orchestration.config import Settings
from llm_orchestration.llm.base_client import LanguageModel
from llm_orchestration.models.llm_models import (
    GenerationRequest,
    LLMObjectResponse,
    LLMResponse,
    MessageLike,
    coerce_messages,
)
from llm_orchestration.monitoring.metrics import retries_total
from llm_orchestration.retry.exceptions import RetryExhausted
from llm_orchestration.retry.metadata import RetryMetadata
from llm_orchestration.retry.validators import ValidationError, Validator

logger = structlog.get_logger(__name__)

FEEDBACK_TEMPLATE = "The previous attempt failed with error: {error}. Please try again."

Call = Callable[[GenerationRequest], Awaitable[Union[LLMResponse, LLMObjectResponse]]]


class RetryEngine:
    """
    Retry controller with temperature escalation and error feedback.

    Attributes:
        model: Provider used for every attempt
        max_attempts: Total attempts (first try included)
        temperature_step: Temperature added per retry
        temperature_cap: Upper bound for the temperature
    """

    def __init__(
        self,
        model: LanguageModel,
        max_attempts: int = 3,
        temperature_step: float = 0.3,
        temperature_cap: float = 1.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self.model = model
        self.max_attempts = max_attempts
        self.temperature_step = temperature_step
        self.temperature_cap = temperature_cap

    @classmethod
    def from_settings(
        cls,
        model: LanguageModel,
        settings: Settings,
        max_attempts: Optional[int] = None,
    ) -> "RetryEngine":
        """
        Build an engine from RETRY_* settings.

        Args:
            max_attempts: Bound override; defaults to INSTRUCTION_MAX_ATTEMPTS.
                Execution and extraction callers pass EXECUTION_MAX_ATTEMPTS
                and EXTRACTION_MAX_ATTEMPTS.
        """
        return cls(
            model,
            max_attempts=settings.INSTRUCTION_MAX_ATTEMPTS if max_attempts is None else max_attempts,
            temperature_step=settings.RETRY_TEMPERATURE_STEP,
            temperature_cap=settings.RETRY_TEMPERATURE_CAP,
        )

    def temperature_for_attempt(self, attempt: int) -> float:
        """Temperature of the zero-indexed attempt: 0, then step*n capped."""
        if attempt <= 0:
            return 0.0
        return round(min(self.temperature_step * attempt, self.temperature_cap), 6)

    async def generate_object(
        self,
        messages: Iterable[MessageLike],
        schema: Optional[dict[str, Any]],
        validator: Optional[Validator] = None,
    ) -> tuple[Any, RetryMetadata]:
        """
        Structured generation with retries.

        Returns:
            Tuple of (validated value, retry metadata)

        Raises:
            RetryExhausted: Every attempt failed
        """
        async def call(request: GenerationRequest) -> LLMObjectResponse:
            return await self.model.generate_object(
                list(request.messages), request.response_schema, request.temperature
            )

        return await self._run(messages, schema, call, validator)

    async def generate_text(
        self,
        messages: Iterable[MessageLike],
        validator: Optional[Validator] = None,
    ) -> tuple[Any, RetryMetadata]:
        """
        Free-text generation with retries.

        Returns:
            Tuple of (validated text, retry metadata)

        Raises:
            RetryExhausted: Every attempt failed
        """
        async def call(request: GenerationRequest) -> LLMResponse:
            return await self.model.generate_text(list(request.messages), request.temperature)

        return await self._run(messages, None, call, validator)

    async def _run(
        self,
        messages: Iterable[MessageLike],
        schema: Optional[dict[str, Any]],
        call: Call,
        validator: Optional[Validator],
    ) -> tuple[Any, RetryMetadata]:
        start_time = time.perf_counter()
        request = GenerationRequest(
            messages=tuple(coerce_messages(messages)),
            temperature=self.temperature_for_attempt(0),
            response_schema=schema,
        )
        temperatures: list[float] = []
        failures: list[dict] = []
        last_error: Optional[Exception] = None

        for attempt in range(self.max_attempts):
            temperatures.append(request.temperature)

            try:
                result = await call(request)
                value = validator(result.response) if validator else result.response

            except Exception as e:
                last_error = e
                failures.append({
                    "attempt": attempt,
                    "temperature": request.temperature,
                    "error_type": type(e).__name__,
                    "error": str(e),
                })

                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_attempts} failed",
                    attempt=attempt,
                    temperature=request.temperature,
                    failure_kind="validation" if isinstance(e, ValidationError) else "error",
                    error_type=type(e).__name__,
                    error=str(e),
                )

                if attempt + 1 < self.max_attempts:
                    retries_total.labels(outcome="retried").inc()
                    request = request.with_feedback(
                        FEEDBACK_TEMPLATE.format(error=e),
                        self.temperature_for_attempt(attempt + 1),
                    )
                continue

            metadata = self._metadata(start_time, temperatures, failures, request)
            if attempt > 0:
                retries_total.labels(outcome="recovered").inc()
                logger.info(
                    "Retry engine succeeded after retries",
                    total_attempts=metadata.total_attempts,
                    total_latency_ms=metadata.total_latency_ms,
                )
            return value, metadata

        metadata = self._metadata(start_time, temperatures, failures, request)
        retries_total.labels(outcome="exhausted").inc()
        logger.error(
            f"Generation failed after {self.max_attempts} attempts",
            total_attempts=metadata.total_attempts,
            total_latency_ms=metadata.total_latency_ms,
            final_error_type=type(last_error).__name__,
            final_error=str(last_error),
        )
        raise RetryExhausted(last_error=last_error, retry_metadata=metadata) from last_error

    @staticmethod
    def _metadata(
        start_time: float,
        temperatures: list[float],
        failures: list[dict],
        request: GenerationRequest,
    ) -> RetryMetadata:
        return RetryMetadata(
            total_attempts=len(temperatures),
            temperatures=list(temperatures),
            total_latency_ms=int((time.perf_counter() - start_time) * 1000),
            failures=list(failures),
            messages=request.messages,
        )
