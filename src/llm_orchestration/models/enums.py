"""
Enum definitions shared across the orchestration core.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Conversation roles understood by every provider."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ProviderName(str, Enum):
    """Backend model vendors selectable through configuration."""

    OPENAI = "openai"
    GEMINI = "gemini"
