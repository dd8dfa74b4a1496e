"""
In-memory response cache for deterministic model calls.

Only temperature-zero results are worth memoizing: the provider wrapper
consults this cache before dispatching such a call and stores the result
afterwards. Entries expire lazily on read and the single oldest entry is
evicted when the cache is full.

The cache is process-local. It is a latency/cost optimization, so losing it
on restart is acceptable.
"""

import copy
import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

import structlog

from llm_orchestration.config import Settings
from llm_orchestration.models.llm_models import Message
from llm_orchestration.monitoring.metrics import llm_cache_events_total


logger = structlog.get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A stored value and its creation time (clock seconds)."""

    timestamp: float
    value: T


def normalize_for_key(obj: Any) -> Any:
    """
    Recursively sort mapping keys so that key order never changes a digest.

    Sequences keep their order; it is semantically significant for both
    message histories and schema arrays such as ``enum``.
    """
    if isinstance(obj, Mapping):
        return {str(key): normalize_for_key(obj[key]) for key in sorted(obj, key=str)}
    if isinstance(obj, (list, tuple)):
        return [normalize_for_key(item) for item in obj]
    return obj


def _message_identity(message: Any) -> dict[str, Any]:
    """Reduce a message to the fields that identify it: role and content."""
    if isinstance(message, Message):
        return {"role": message.role.value, "content": message.content}
    role = message.get("role")
    return {"role": getattr(role, "value", role), "content": message.get("content")}


def make_cache_key(
    messages: Iterable[Any],
    temperature: float,
    schema: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Derive a fixed-length cache key for a generation request.

    Args:
        messages: Conversation history (Message objects or role/content dicts)
        temperature: Sampling temperature
        schema: Optional JSON Schema of a structured request

    Returns:
        Hex SHA-256 digest, stable under key-order permutations of messages
        and schema.
    """
    key_obj = {
        "messages": [_message_identity(message) for message in messages],
        "temperature": float(temperature),
        "schema": normalize_for_key(schema) if schema is not None else None,
    }
    payload = json.dumps(normalize_for_key(key_obj), separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResponseCache(Generic[T]):
    """
    Bounded, expiring memo of model results.

    Thread-safe: all reads and writes go through one lock, so the cache may be
    shared by concurrent requests. Values are deep-copied in and out; callers
    never hold a reference to a stored entry.

    Attributes:
        enabled: False turns both get and set into no-ops
        max_age: Entry lifetime in seconds
        max_size: Maximum number of entries after any set() returns
    """

    def __init__(
        self,
        enabled: bool = True,
        max_age: float = 3600.0,
        max_size: int = 1000,
        clock: Clock = time.time,
    ):
        """
        Initialize the cache.

        Args:
            enabled: Whether the cache stores and serves entries
            max_age: Entry lifetime in seconds (default: 1 hour)
            max_size: Entry count bound (default: 1000)
            clock: Zero-argument callable returning the current time in seconds
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        if max_age < 0:
            raise ValueError("max_age must be >= 0")

        self.enabled = enabled
        self.max_age = max_age
        self.max_size = max_size
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = time.time) -> "ResponseCache[T]":
        """Build a cache from LLM_CACHE_* settings (TTL is in milliseconds)."""
        return cls(
            enabled=settings.LLM_CACHE_ENABLED,
            max_age=settings.LLM_CACHE_TTL / 1000.0,
            max_size=settings.LLM_CACHE_SIZE,
            clock=clock,
        )

    def get(
        self,
        messages: Iterable[Any],
        temperature: float,
        schema: Optional[Mapping[str, Any]] = None,
    ) -> Optional[T]:
        """
        Look up a cached value.

        Returns:
            A copy of the cached value, or None when disabled, absent or
            expired. Expired entries are deleted on the way out.
        """
        if not self.enabled:
            return None

        key = make_cache_key(messages, temperature, schema)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                llm_cache_events_total.labels(event="miss").inc()
                return None

            if self._clock() - entry.timestamp > self.max_age:
                del self._entries[key]
                llm_cache_events_total.labels(event="expired").inc()
                logger.debug("LLM cache entry expired", key=key[:8])
                return None

            value = copy.deepcopy(entry.value)

        llm_cache_events_total.labels(event="hit").inc()
        logger.info("LLM cache hit", key=key[:8])
        return value

    def set(
        self,
        messages: Iterable[Any],
        temperature: float,
        value: T,
        schema: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Store a value, evicting the oldest entry first when at capacity.

        Overwriting an existing key does not grow the cache, so no eviction
        is needed in that case.
        """
        if not self.enabled:
            return

        key = make_cache_key(messages, temperature, schema)
        entry = CacheEntry(timestamp=self._clock(), value=copy.deepcopy(value))

        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                oldest_key = min(self._entries, key=lambda k: self._entries[k].timestamp)
                del self._entries[oldest_key]
                llm_cache_events_total.labels(event="evicted").inc()
                logger.debug("LLM cache evicted oldest entry", key=oldest_key[:8])

            self._entries[key] = entry

        logger.debug("LLM cache set", key=key[:8])

    def clear(self) -> None:
        """Remove every entry, regardless of the enabled flag."""
        with self._lock:
            self._entries.clear()
        logger.info("LLM cache cleared")

    @property
    def size(self) -> int:
        """Current number of entries."""
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"enabled={self.enabled}, "
            f"max_age={self.max_age}s, "
            f"max_size={self.max_size})"
        )
