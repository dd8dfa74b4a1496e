"""Monitoring and metrics instrumentation for the LLM orchestration core."""

from llm_orchestration.monitoring.metrics import (
    llm_cache_events_total,
    llm_latency_seconds,
    llm_requests_total,
    queue_jobs_total,
    retries_total,
)

__all__ = [
    "llm_requests_total",
    "llm_latency_seconds",
    "llm_cache_events_total",
    "retries_total",
    "queue_jobs_total",
]
