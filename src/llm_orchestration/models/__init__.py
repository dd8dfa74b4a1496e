"""
Pydantic data models for the orchestration core.

Includes:
- Enums (MessageRole, ProviderName)
- Conversation models (Message, GenerationRequest)
- Provider results (LLMResponse, LLMObjectResponse)
- SystemDefinition (instruction-suggestion input)
"""

from llm_orchestration.models.enums import MessageRole, ProviderName
from llm_orchestration.models.llm_models import (
    GenerationRequest,
    LLMObjectResponse,
    LLMResponse,
    Message,
    MessageLike,
    SystemDefinition,
    coerce_messages,
)

__all__ = [
    "MessageRole",
    "ProviderName",
    "Message",
    "MessageLike",
    "coerce_messages",
    "GenerationRequest",
    "LLMResponse",
    "LLMObjectResponse",
    "SystemDefinition",
]
