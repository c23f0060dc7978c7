"""
Module: memory.py
Description: In-process job queue for local runs and tests.

Holds scheduled continuations in memory and resumes them on drain(),
optionally sleeping for the requested delay first.
"""

import asyncio
import uuid
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, ConfigDict

from webhook_dispatch.models.continuation import RetryContinuation
from webhook_dispatch.models.result import DeliveryBatch
from webhook_dispatch.utils.logger import get_logger

logger = get_logger(__name__)


class ScheduledJob(BaseModel):
    """A continuation waiting in the in-memory queue."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    continuation: RetryContinuation
    delay: float
    queue: Optional[str] = None


class InMemoryJobQueue:
    """Job queue keeping continuations in a list until drained."""

    def __init__(self):
        self.jobs: List[ScheduledJob] = []

    async def schedule(
        self,
        continuation: RetryContinuation,
        delay: float,
        queue: Optional[str] = None
    ) -> str:
        job = ScheduledJob(
            job_id=uuid.uuid4().hex,
            continuation=continuation,
            delay=delay,
            queue=queue
        )
        self.jobs.append(job)

        logger.debug(
            "Continuation scheduled in memory",
            job_id=job.job_id,
            webhook=continuation.class_identifier,
            attempt=continuation.attempt,
            delay_seconds=delay
        )
        return job.job_id

    async def drain(
        self,
        resolve: Callable[[str], Any],
        sleep: bool = False,
        max_jobs: int = 1000
    ) -> List[DeliveryBatch]:
        """
        Resume queued continuations until the queue is empty.

        Continuations scheduled while draining are resumed in the same
        call, so a drain runs deliveries to completion or exhaustion.

        Args:
            resolve: Returns the orchestrator for a class identifier
            sleep: Wait out each job's delay before resuming it
            max_jobs: Upper bound on jobs resumed in one drain

        Returns:
            Batches produced by the resumed deliveries
        """
        batches: List[DeliveryBatch] = []
        processed = 0

        while self.jobs and processed < max_jobs:
            job = self.jobs.pop(0)
            processed += 1

            if sleep and job.delay > 0:
                await asyncio.sleep(job.delay)

            orchestrator = resolve(job.continuation.class_identifier)
            batch = await orchestrator.resume(job.continuation)
            if batch is not None:
                batches.append(batch)

        return batches
