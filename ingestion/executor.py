"""
Batch Executor
==============
Runs the per-id work for one dequeued batch and records the outcome on it.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from ingestion.models import Batch, BatchStatus
from ingestion.repository import InMemoryBatchRepository

logger = logging.getLogger(__name__)

WorkFunction = Callable[[int], Awaitable[Dict[str, Any]]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SimulatedExternalAPI:
    """Stands in for the downstream API: sleeps a bounded random time per id."""

    def __init__(
        self,
        min_latency: float = 0.1,
        max_latency: float = 0.5,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0 <= min_latency <= max_latency:
            raise ValueError("latency bounds must satisfy 0 <= min <= max")
        self.min_latency = min_latency
        self.max_latency = max_latency
        self._rng = rng or random.Random()

    async def __call__(self, item_id: int) -> Dict[str, Any]:
        await asyncio.sleep(self._rng.uniform(self.min_latency, self.max_latency))
        return {"id": item_id, "data": "processed", "timestamp": utcnow().isoformat()}


class BatchExecutor:
    """Executes one batch at a time, sequentially over its ids.

    Failures are contained here: the batch is marked ``failed`` with the
    error message and the results gathered so far are kept. Nothing is
    retried and nothing is re-raised to the scheduler, except cancellation,
    which still marks the batch failed before propagating.
    """

    def __init__(
        self,
        repository: InMemoryBatchRepository,
        work: WorkFunction,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._work = work
        self._clock = clock

    async def execute(self, batch: Batch) -> BatchStatus:
        self._repository.mark_triggered(batch, self._clock())
        logger.info("Processing batch %s with IDs %s", batch.batch_id, batch.ids)

        try:
            for item_id in batch.ids:
                result = await self._work(item_id)
                self._repository.append_result(batch, result)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            self._repository.mark_failed(batch, message, self._clock())
            logger.exception("Batch %s failed after %d of %d ids", batch.batch_id, len(batch.results), len(batch.ids))
            return BatchStatus.FAILED
        except asyncio.CancelledError:
            self._repository.mark_failed(batch, "cancelled", self._clock())
            logger.warning("Batch %s cancelled after %d of %d ids", batch.batch_id, len(batch.results), len(batch.ids))
            raise

        self._repository.mark_completed(batch, self._clock())
        logger.info("Completed batch %s", batch.batch_id)
        return BatchStatus.COMPLETED
