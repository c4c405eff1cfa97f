"""In-memory tables of ingestions and batches."""

import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ingestion.models import (
    Batch,
    BatchStatus,
    BatchView,
    Ingestion,
    IngestionError,
    can_transition,
)


class InMemoryBatchRepository:
    """Owns every ingestion and batch record for the lifetime of the process.

    All reads and writes go through one lock so request handlers and the
    scheduler can touch the tables from different threads. Records are never
    evicted.
    """

    def __init__(self) -> None:
        self._ingestions: Dict[str, Ingestion] = {}
        self._batches: Dict[str, Batch] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # creation & lookup
    # ------------------------------------------------------------------
    def add(self, ingestion: Ingestion, batches: Sequence[Batch]) -> None:
        """Store an ingestion together with all of its batches."""
        if [batch.batch_id for batch in batches] != list(ingestion.batch_ids):
            raise IngestionError(f"batches do not match ingestion {ingestion.ingestion_id}")
        with self._lock:
            if ingestion.ingestion_id in self._ingestions:
                raise IngestionError(f"duplicate ingestion id {ingestion.ingestion_id}")
            for batch in batches:
                self._batches[batch.batch_id] = batch
            self._ingestions[ingestion.ingestion_id] = ingestion

    def get_ingestion(self, ingestion_id: str) -> Optional[Ingestion]:
        with self._lock:
            return self._ingestions.get(ingestion_id)

    def get_batch(self, batch_id: str) -> Optional[Batch]:
        with self._lock:
            return self._batches.get(batch_id)

    def batch_views(self, ingestion_id: str) -> Optional[List[BatchView]]:
        """Snapshot of an ingestion's batches in creation order."""
        with self._lock:
            ingestion = self._ingestions.get(ingestion_id)
            if ingestion is None:
                return None
            return [
                BatchView(batch_id=batch.batch_id, ids=list(batch.ids), status=batch.status)
                for batch in (self._batches[batch_id] for batch_id in ingestion.batch_ids)
            ]

    def count_by_status(self, status: BatchStatus) -> int:
        with self._lock:
            return sum(1 for batch in self._batches.values() if batch.status == status)

    def __len__(self) -> int:
        with self._lock:
            return len(self._ingestions)

    # ------------------------------------------------------------------
    # batch mutation (scheduler/executor only)
    # ------------------------------------------------------------------
    def _transition(self, batch: Batch, target: BatchStatus) -> None:
        if not can_transition(batch.status, target):
            raise IngestionError(
                f"batch {batch.batch_id} cannot move from {batch.status.value} to {target.value}"
            )
        batch.status = target

    def mark_triggered(self, batch: Batch, started_at: datetime) -> None:
        with self._lock:
            self._transition(batch, BatchStatus.TRIGGERED)
            batch.started_at = started_at

    def append_result(self, batch: Batch, result: Dict[str, Any]) -> None:
        with self._lock:
            batch.results.append(result)

    def mark_completed(self, batch: Batch, completed_at: datetime) -> None:
        with self._lock:
            self._transition(batch, BatchStatus.COMPLETED)
            batch.completed_at = completed_at

    def mark_failed(self, batch: Batch, error: str, completed_at: datetime) -> None:
        with self._lock:
            self._transition(batch, BatchStatus.FAILED)
            batch.error = error
            batch.completed_at = completed_at
