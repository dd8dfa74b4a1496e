"""
Custom exceptions for the provider layer.

These exceptions let the retry engine and external callers distinguish
between a failed transport ("the vendor could not be reached or refused")
and a malformed reply ("the model answered, but not in the requested shape").
"""


class LLMClientError(Exception):
    """
    Base exception for all provider errors.

    All provider-specific exceptions inherit from this to allow catching
    any model-call failure with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMConnectionError(LLMClientError):
    """
    Raised when the vendor API cannot be reached.

    Includes network errors, DNS failures, refused connections, etc.
    """
    pass


class LLMTimeoutError(LLMConnectionError):
    """
    Raised when a model call exceeds the configured LLM_TIMEOUT.

    The deadline is enforced at the provider boundary; the in-flight
    request is abandoned when it fires.
    """
    pass


class LLMGenerationError(LLMClientError):
    """
    Raised when the vendor returns an error or an unusable body.

    Examples:
    - HTTP 4xx/5xx from the vendor
    - Response body that is not the documented JSON envelope
    - Reply with no content (e.g. blocked by a safety filter)
    """
    pass


class LLMRateLimitError(LLMGenerationError):
    """
    Raised when the vendor rate-limits the request (HTTP 429).
    """
    pass


class LLMAuthenticationError(LLMGenerationError):
    """
    Raised when the vendor rejects the credentials (HTTP 401/403).
    """
    pass


class LLMParseError(LLMClientError):
    """
    Raised when a structured reply cannot be parsed as JSON.

    Kept outside LLMGenerationError so callers can tell "model replied
    with malformed output" apart from "transport failed".
    """

    def __init__(self, message: str, raw_content: str | None = None, parse_error: str | None = None):
        """
        Initialize parse error.

        Args:
            message: Error description
            raw_content: Reply text (first 500 chars are kept for debugging)
            parse_error: Original json.JSONDecodeError message
        """
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error

        super().__init__(message, details)
