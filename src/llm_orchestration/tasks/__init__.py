"""
Background task execution.

Components:
- DedupQueue: single-flight FIFO queue, one worker per instance
- Job: id + zero-argument task
"""

from llm_orchestration.tasks.dedup_queue import DedupQueue, Job

__all__ = ["DedupQueue", "Job"]
