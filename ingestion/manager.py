"""
Ingestion Manager
=================
Public surface of the scheduling core used by the HTTP layer.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Union

from ingestion.batching import split_into_batches
from ingestion.config import Settings
from ingestion.executor import BatchExecutor, SimulatedExternalAPI, WorkFunction
from ingestion.models import BatchStatus, Ingestion, IngestionStatus, Priority
from ingestion.priority_queue import BatchQueue
from ingestion.repository import InMemoryBatchRepository
from ingestion.scheduler import RateLimitedScheduler
from ingestion.status import aggregate_status

logger = logging.getLogger(__name__)


class IngestionManager:
    """Creates ingestions, feeds the queue and answers status queries.

    One instance owns the repository, the queue and the scheduler; nothing
    else holds references to that state.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        work: Optional[WorkFunction] = None,
        wall_clock: Callable[[], float] = time.time,
        monotonic_clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or Settings()
        self._wall_clock = wall_clock
        self._repository = InMemoryBatchRepository()
        self._queue = BatchQueue()
        if work is None:
            work = SimulatedExternalAPI(
                self.settings.min_work_latency_seconds,
                self.settings.max_work_latency_seconds,
            )
        self._executor = BatchExecutor(self._repository, work)
        self.scheduler = RateLimitedScheduler(
            self._queue,
            self._executor,
            interval=self.settings.rate_limit_seconds,
            idle_interval=self.settings.idle_poll_seconds,
            clock=monotonic_clock,
        )

    @property
    def repository(self) -> InMemoryBatchRepository:
        return self._repository

    @property
    def queue(self) -> BatchQueue:
        return self._queue

    def create_ingestion(
        self,
        ids: Sequence[int],
        priority: Union[Priority, str] = Priority.MEDIUM,
    ) -> str:
        """Split ``ids`` into batches, queue them and return the new ingestion id.

        Raises InvalidPriorityError before anything is stored or queued.
        Returns immediately; processing happens on the scheduler's ticks.
        """
        priority = Priority.parse(priority)
        ids = list(ids)
        if not ids:
            raise ValueError("an ingestion needs at least one id")

        ingestion_id = str(uuid.uuid4())
        created_at = self._wall_clock()
        batches = split_into_batches(
            ingestion_id, ids, priority, created_at, size=self.settings.batch_size
        )
        ingestion = Ingestion(
            ingestion_id=ingestion_id,
            ids=ids,
            priority=priority,
            created_at=created_at,
            batch_ids=[batch.batch_id for batch in batches],
        )
        self._repository.add(ingestion, batches)
        for batch in batches:
            self._queue.enqueue(batch)

        logger.info(
            "Created ingestion %s with %d batches (priority: %s)",
            ingestion_id, len(batches), priority.value,
        )
        return ingestion_id

    def get_ingestion_status(self, ingestion_id: str) -> Optional[IngestionStatus]:
        """Current status of an ingestion, or None when the id is unknown."""
        views = self._repository.batch_views(ingestion_id)
        if views is None:
            return None
        return IngestionStatus(
            ingestion_id=ingestion_id,
            status=aggregate_status(view.status for view in views),
            batches=views,
        )

    def queue_size(self) -> int:
        return len(self._queue)

    def active_batch_count(self) -> int:
        return self._repository.count_by_status(BatchStatus.TRIGGERED)

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def overview(self) -> Dict[str, Any]:
        return {
            "system_status": "running" if self.scheduler.running else "stopped",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "queue_size": self.queue_size(),
            "active_batches": self.active_batch_count(),
            "rate_limit_info": {
                "max_ids_per_batch": self.settings.batch_size,
                "batch_interval_seconds": self.settings.rate_limit_seconds,
            },
        }
