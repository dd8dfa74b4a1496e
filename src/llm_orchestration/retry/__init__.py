"""
Retry-with-regeneration controller.

Failed structured calls are retried with the error fed back into the
conversation and progressively higher temperature. The same loop backs
instruction suggestion here and config regeneration in external callers.

Main Components:
    - RetryEngine: attempt loop with temperature escalation
    - RetryMetadata: immutable history of attempts
    - RetryExhausted: raised when the attempt bound is reached
    - validators: non_empty_array, JSONSchemaValidator, compose_validators
    - sanitizer: sanitize_instruction_suggestions, sanitized_string_list
"""

from llm_orchestration.retry.engine import RetryEngine
from llm_orchestration.retry.exceptions import RetryExhausted
from llm_orchestration.retry.metadata import RetryMetadata
from llm_orchestration.retry.sanitizer import (
    sanitize_instruction_suggestions,
    sanitized_string_list,
)
from llm_orchestration.retry.validators import (
    JSONSchemaValidator,
    ValidationError,
    Validator,
    compose_validators,
    non_empty_array,
)

__all__ = [
    "RetryEngine",
    "RetryExhausted",
    "RetryMetadata",
    "ValidationError",
    "Validator",
    "JSONSchemaValidator",
    "compose_validators",
    "non_empty_array",
    "sanitize_instruction_suggestions",
    "sanitized_string_list",
]
