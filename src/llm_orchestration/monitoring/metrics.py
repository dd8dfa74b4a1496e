"""Prometheus metrics for the LLM orchestration core.

Collectors are module-level so every provider, cache and queue instance in the
process reports into the same series.
"""

from prometheus_client import Counter, Histogram

# === Provider Metrics ===

llm_requests_total = Counter(
    "llm_requests_total",
    "Total model calls by provider, call kind and outcome",
    ["provider", "kind", "outcome"],
)
"""
Labels:
- provider: openai, gemini
- kind: text, object
- outcome: success, transport_error, parse_error
"""

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "Model call latency in seconds",
    ["provider", "kind"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

# === Cache Metrics ===

llm_cache_events_total = Counter(
    "llm_cache_events_total",
    "Response cache events",
    ["event"],
)
"""
Labels:
- event: hit, miss, expired, evicted
"""

# === Retry Metrics ===

retries_total = Counter(
    "retries_total",
    "Retry attempts by outcome",
    ["outcome"],
)
"""
Labels:
- outcome: retried (attempt failed, another follows), exhausted, recovered
"""

# === Queue Metrics ===

queue_jobs_total = Counter(
    "queue_jobs_total",
    "Background jobs by queue type and outcome",
    ["queue", "outcome"],
)
"""
Labels:
- queue: queue type name (e.g. documentation)
- outcome: completed, failed, deduplicated
"""
