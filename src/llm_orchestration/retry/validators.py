"""
Result validators for the retry engine.

A validator receives the parsed model output and returns the accepted
value (possibly transformed), or raises ValidationError. A rejection is a
retryable condition: the engine feeds the error text back to the model.
"""

from typing import Any, Callable

import structlog
from jsonschema import Draft7Validator

logger = structlog.get_logger(__name__)


Validator = Callable[[Any], Any]


class ValidationError(Exception):
    """
    Raised when a parsed reply does not meet the caller's expectations.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize validation error.

        Args:
            message: Human-readable error description (fed back to the model)
            details: Structured error data for logging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


def non_empty_array(value: Any) -> list:
    """Accept only a list with at least one element."""
    if not isinstance(value, list) or len(value) == 0:
        raise ValidationError(
            "Expected a non-empty array",
            details={"received_type": type(value).__name__},
        )
    return value


class JSONSchemaValidator:
    """
    Validate output against the caller's JSON Schema.

    Use with the caller's original schema, not the vendor-adapted one, so
    that nullable widening does not loosen the check.
    """

    def __init__(self, schema: dict[str, Any], max_errors: int = 10):
        self.schema = schema
        self.max_errors = max_errors
        self._validator = Draft7Validator(schema)

    def __call__(self, value: Any) -> Any:
        errors = list(self._validator.iter_errors(value))

        if errors:
            error_messages = []
            for error in errors[:self.max_errors]:
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            raise ValidationError(
                f"JSON Schema validation failed with {len(errors)} error(s)",
                details={"validation_errors": error_messages},
            )

        logger.debug("Output conforms to JSON Schema")
        return value


def compose_validators(*validators: Validator) -> Validator:
    """Chain validators; each receives the value accepted by the previous one."""

    def _validate(value: Any) -> Any:
        for validator in validators:
            value = validator(value)
        return value

    return _validate
