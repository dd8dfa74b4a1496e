"""
Provider abstraction and vendor implementations.

Components:
- LanguageModel: capability set consumed by callers
- BaseLLMClient: shared HTTP plumbing for vendor clients
- OpenAIClient: strict-mode structured output family
- GeminiClient: schema-stripping structured output family
- CachedLanguageModel: response-cache decorator
- create_language_model: configuration-driven provider selection
- exceptions: provider error taxonomy
"""

from llm_orchestration.llm.base_client import BaseLLMClient, LanguageModel
from llm_orchestration.llm.cached_model import CachedLanguageModel
from llm_orchestration.llm.exceptions import (
    LLMAuthenticationError,
    LLMClientError,
    LLMConnectionError,
    LLMGenerationError,
    LLMParseError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from llm_orchestration.llm.factory import create_language_model, create_vendor_client
from llm_orchestration.llm.gemini_client import GeminiClient
from llm_orchestration.llm.openai_client import OpenAIClient

__all__ = [
    "LanguageModel",
    "BaseLLMClient",
    "OpenAIClient",
    "GeminiClient",
    "CachedLanguageModel",
    "create_language_model",
    "create_vendor_client",
    "LLMClientError",
    "LLMConnectionError",
    "LLMTimeoutError",
    "LLMGenerationError",
    "LLMRateLimitError",
    "LLMAuthenticationError",
    "LLMParseError",
]
