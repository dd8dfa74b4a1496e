"""
Retry metadata tracking.

RetryMetadata captures the history of one engine invocation: how many
attempts ran, at which temperatures, why each failed, and the final
accumulated conversation (including injected error feedback).
"""

from dataclasses import dataclass, field

from llm_orchestration.models.llm_models import Message


@dataclass(frozen=True)
class RetryMetadata:
    """
    History of one retry-engine invocation.

    Attributes:
        total_attempts: Number of model calls made
        temperatures: Temperature used for each attempt, in order
        failures: One dict per failed attempt (attempt, error_type, error)
        total_latency_ms: Wall time from first attempt to final outcome
        messages: Accumulated history sent on the last attempt
    """

    total_attempts: int
    temperatures: list[float]
    total_latency_ms: int
    failures: list[dict] = field(default_factory=list)
    messages: tuple[Message, ...] = ()

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")

        if len(self.temperatures) != self.total_attempts:
            raise ValueError("temperatures must hold one entry per attempt")

        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")

    @property
    def succeeded_after_retry(self) -> bool:
        return self.total_attempts > 1 and len(self.failures) == self.total_attempts - 1
