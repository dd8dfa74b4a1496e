"""
LLM orchestration and resilience core for the data-pipeline proxy.

Turns unreliable, rate-limited hosted language models into a safe building block:
- Provider abstraction (OpenAI strict-mode family, Gemini schema-stripping family)
- Deterministic response cache for temperature-zero calls
- Retry-with-regeneration controller (temperature escalation + error feedback)
- Single-flight deduplicating background job queue

Architecture: httpx vendor clients + in-process cache/queue, structlog logging
"""

__version__ = "0.1.0"
