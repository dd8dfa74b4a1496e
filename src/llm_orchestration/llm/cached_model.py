"""
Caching decorator around any LanguageModel.

Deterministic calls (temperature 0 on a backend that honors it) are served from a ResponseCache when
possible and stored after a successful dispatch. Non-zero temperatures
bypass the cache entirely, in both directions.
"""

from typing import Any, Iterable, Optional

import structlog

from llm_orchestration.cache.response_cache import ResponseCache
from llm_orchestration.llm.base_client import LanguageModel
from llm_orchestration.models.llm_models import (
    LLMObjectResponse,
    LLMResponse,
    MessageLike,
    coerce_messages,
)


logger = structlog.get_logger(__name__)


class CachedLanguageModel(LanguageModel):
    """
    LanguageModel wrapper owning one text cache and one object cache.

    Object results are keyed on the caller's schema as supplied, before
    any vendor adaptation, so lookup and store always agree.
    """

    def __init__(
        self,
        inner: LanguageModel,
        text_cache: Optional[ResponseCache[LLMResponse]] = None,
        object_cache: Optional[ResponseCache[LLMObjectResponse]] = None,
    ):
        self.inner = inner
        self.text_cache: ResponseCache[LLMResponse] = (
            text_cache if text_cache is not None else ResponseCache()
        )
        self.object_cache: ResponseCache[LLMObjectResponse] = (
            object_cache if object_cache is not None else ResponseCache()
        )

    async def generate_text(
        self,
        messages: Iterable[MessageLike],
        temperature: float = 0.0,
    ) -> LLMResponse:
        history = coerce_messages(messages)
        cacheable = self.is_deterministic(temperature)

        if cacheable:
            cached = self.text_cache.get(history, temperature)
            if cached is not None:
                return cached

        result = await self.inner.generate_text(history, temperature)

        if cacheable:
            self.text_cache.set(history, temperature, result)
        return result

    async def generate_object(
        self,
        messages: Iterable[MessageLike],
        schema: Optional[dict[str, Any]],
        temperature: float = 0.0,
    ) -> LLMObjectResponse:
        history = coerce_messages(messages)
        cacheable = self.is_deterministic(temperature)

        if cacheable:
            cached = self.object_cache.get(history, temperature, schema)
            if cached is not None:
                return cached

        result = await self.inner.generate_object(history, schema, temperature)

        if cacheable:
            self.object_cache.set(history, temperature, result, schema)
        return result

    def is_deterministic(self, temperature: float) -> bool:
        return self.inner.is_deterministic(temperature)

    def clear_cache(self) -> None:
        """Empty both caches."""
        self.text_cache.clear()
        self.object_cache.clear()

    async def close(self):
        await self.inner.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(inner={self.inner!r})"
