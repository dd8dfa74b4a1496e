"""
Provider selection.

create_language_model() builds the configured vendor client and wraps it
with the response cache. Callers depend only on the LanguageModel
interface it returns.
"""

import time
from typing import Optional

import httpx
import structlog

from llm_orchestration.cache.response_cache import Clock, ResponseCache
from llm_orchestration.config import Settings
from llm_orchestration.llm.base_client import BaseLLMClient, LanguageModel
from llm_orchestration.llm.cached_model import CachedLanguageModel
from llm_orchestration.llm.gemini_client import GeminiClient
from llm_orchestration.llm.openai_client import OpenAIClient
from llm_orchestration.models.enums import ProviderName


logger = structlog.get_logger(__name__)


def create_vendor_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseLLMClient:
    """
    Build the uncached vendor client selected by LLM_PROVIDER.

    Raises:
        ValueError: Unknown provider or missing API key
    """
    provider = ProviderName(settings.LLM_PROVIDER)

    if provider is ProviderName.OPENAI:
        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY is not set; it is required for LLM_PROVIDER=openai")
        return OpenAIClient(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.LLM_TIMEOUT,
            transport=transport,
        )

    if provider is ProviderName.GEMINI:
        if not settings.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY is not set; it is required for LLM_PROVIDER=gemini")
        return GeminiClient(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.LLM_TIMEOUT,
            transport=transport,
        )

    raise ValueError(f"Unsupported LLM provider: {settings.LLM_PROVIDER}")


def create_language_model(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Clock = time.time,
) -> CachedLanguageModel:
    """
    Build the configured provider wrapped with text and object caches.

    Args:
        settings: Application settings
        transport: Optional httpx transport override
        clock: Cache clock (seconds), injectable for tests
    """
    client = create_vendor_client(settings, transport=transport)
    model = CachedLanguageModel(
        client,
        text_cache=ResponseCache.from_settings(settings, clock=clock),
        object_cache=ResponseCache.from_settings(settings, clock=clock),
    )

    logger.info(
        "Language model created",
        provider=settings.LLM_PROVIDER,
        model=client.model,
        cache_enabled=settings.LLM_CACHE_ENABLED,
        cache_ttl_ms=settings.LLM_CACHE_TTL,
        cache_size=settings.LLM_CACHE_SIZE,
    )
    return model
