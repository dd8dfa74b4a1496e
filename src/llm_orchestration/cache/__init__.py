"""
Deterministic response cache.

Components:
- ResponseCache: bounded, expiring in-memory memo keyed on request content
- CacheEntry: stored value with its creation timestamp
- make_cache_key: order-insensitive request digest
"""

from llm_orchestration.cache.response_cache import (
    CacheEntry,
    ResponseCache,
    make_cache_key,
    normalize_for_key,
)

__all__ = [
    "CacheEntry",
    "ResponseCache",
    "make_cache_key",
    "normalize_for_key",
]
