"""
Data models for the request/response cycle of the provider interface.

Messages are the only conversation representation the core exchanges with its
callers. Vendor clients translate them into each vendor's wire format.
"""

from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from llm_orchestration.models.enums import MessageRole


class Message(BaseModel):
    """
    One conversation turn.
    
    Extra fields on incoming dicts (tool call ids, names, etc.) are dropped:
    only role and content take part in generation and cache keys.
    """
    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=False)
    
    role: MessageRole = Field(..., description="system, user or assistant")
    content: str = Field(..., description="Message text")


MessageLike = Union[Message, Mapping[str, Any]]


def coerce_messages(messages: Iterable[MessageLike]) -> list[Message]:
    """
    Normalize a caller-supplied history into a fresh list of Message objects.
    
    The returned list is always new, so appending to it never touches the
    caller's sequence.
    """
    return [
        message if isinstance(message, Message) else Message.model_validate(message)
        for message in messages
    ]


class GenerationRequest(BaseModel):
    """
    Immutable description of a single model call.
    
    A retry builds a new request; an issued request is never modified.
    """
    model_config = ConfigDict(frozen=True)
    
    messages: tuple[Message, ...] = Field(..., description="Ordered conversation history")
    temperature: float = Field(default=0.0, ge=0.0, le=2.0, description="Sampling temperature")
    response_schema: Optional[dict[str, Any]] = Field(
        default=None,
        description="JSON Schema for structured generation (None for free text)",
    )
    
    def with_feedback(self, feedback: str, temperature: float) -> "GenerationRequest":
        """Return the follow-up request carrying a user feedback message."""
        return GenerationRequest(
            messages=self.messages + (Message(role=MessageRole.USER, content=feedback),),
            temperature=temperature,
            response_schema=self.response_schema,
        )


class LLMResponse(BaseModel):
    """Free-text generation result plus the extended history."""
    model_config = ConfigDict(frozen=True)
    
    response: str = Field(..., description="Model reply text")
    messages: list[Message] = Field(..., description="Input history followed by the assistant reply")


class LLMObjectResponse(BaseModel):
    """Structured generation result plus the extended history."""
    model_config = ConfigDict(frozen=True)
    
    response: Any = Field(..., description="Parsed structured value")
    messages: list[Message] = Field(..., description="Input history followed by the assistant reply")


class SystemDefinition(BaseModel):
    """
    An upstream system the proxy can integrate with.
    
    Used as prompt material for instruction suggestion; only the fields the
    model needs to reason about the system are kept.
    """
    
    id: str = Field(..., description="System identifier")
    url_host: str = Field(default="", description="API host")
    url_path: str = Field(default="", description="API base path")
    documentation_url: str = Field(default="", description="Reference documentation URL")
    documentation: str = Field(default="", description="Ingested documentation text")
