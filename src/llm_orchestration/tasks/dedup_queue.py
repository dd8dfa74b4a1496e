"""
Single-flight, deduplicating background job queue.

Fire-and-forget side tasks (e.g. ingesting reference documentation for an
integration) are submitted with an identity key. While a job with that key
is queued or running, further submissions with the same key are dropped.
Jobs of one queue run strictly one at a time, in arrival order, on a
worker task of the running asyncio event loop.

Independent queue instances (one per task category) share nothing.
"""

import asyncio
import inspect
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from llm_orchestration.monitoring.metrics import queue_jobs_total

logger = structlog.get_logger(__name__)


TaskFn = Callable[[], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class Job:
    """A unit of background work; its identity is its id."""

    id: str
    task: TaskFn


class DedupQueue:
    """
    FIFO job queue with per-id deduplication and a single worker.

    enqueue() must be called from code running on the event loop (it
    schedules the worker with asyncio). Bookkeeping never awaits, so the
    pending list and the tracked-id set are consistent between any two
    suspension points.

    Attributes:
        type: Queue category name, used in logs and metrics
    """

    def __init__(self, queue_type: str = "queue"):
        self.type = queue_type
        self._pending: deque[Job] = deque()
        self._tracked: set[str] = set()
        self._worker: Optional[asyncio.Task] = None

    def enqueue(self, job_id: str, task: TaskFn) -> None:
        """
        Submit a job unless one with the same id is queued or running.

        Errors raised by the task are logged and never reach the caller.

        Raises:
            RuntimeError: Called outside a running event loop
        """
        loop = asyncio.get_running_loop()

        if job_id in self._tracked:
            logger.info(f"Job with ID {job_id} is already in the queue", queue=self.type, job_id=job_id)
            queue_jobs_total.labels(queue=self.type, outcome="deduplicated").inc()
            return

        self._pending.append(Job(id=job_id, task=task))
        self._tracked.add(job_id)

        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._process_queue(), name=f"{self.type}-worker")

    async def _process_queue(self) -> None:
        while self._pending:
            job = self._pending.popleft()
            try:
                logger.info(f"Processing {self.type} {job.id}", queue=self.type, job_id=job.id)
                result = job.task()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"Error processing {self.type} {job.id}",
                    queue=self.type,
                    job_id=job.id,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                queue_jobs_total.labels(queue=self.type, outcome="failed").inc()
            else:
                queue_jobs_total.labels(queue=self.type, outcome="completed").inc()
            finally:
                self._tracked.discard(job.id)

    async def join(self) -> None:
        """Wait until the queue is idle (no pending or running job)."""
        while self._worker is not None and not self._worker.done():
            await self._worker

    def is_tracked(self, job_id: str) -> bool:
        """True while a job with this id is queued or running."""
        return job_id in self._tracked

    @property
    def is_processing(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending_count(self) -> int:
        """Jobs waiting to start (the running job excluded)."""
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._tracked)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type!r}, tracked={len(self._tracked)})"
