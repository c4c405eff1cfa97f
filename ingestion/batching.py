"""Splitting an ingestion's ids into bounded batches."""

import uuid
from typing import Callable, List, Sequence

from ingestion.config import DEFAULT_BATCH_SIZE
from ingestion.models import Batch, Priority


def chunk_ids(ids: Sequence[int], size: int = DEFAULT_BATCH_SIZE) -> List[List[int]]:
    """Cut ``ids`` into contiguous slices of at most ``size`` items, in order."""
    if size < 1:
        raise ValueError("size must be at least 1")
    return [list(ids[i:i + size]) for i in range(0, len(ids), size)]


def split_into_batches(
    ingestion_id: str,
    ids: Sequence[int],
    priority: Priority,
    created_at: float,
    size: int = DEFAULT_BATCH_SIZE,
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> List[Batch]:
    """Build ``yet_to_start`` batch records for one ingestion.

    Every batch but the last holds exactly ``size`` ids and all of them share
    the ingestion's priority and creation time. No validation happens here;
    callers pass ids that are already range-checked.
    """
    return [
        Batch(
            batch_id=id_factory(),
            ingestion_id=ingestion_id,
            ids=chunk,
            priority=priority,
            created_at=created_at,
        )
        for chunk in chunk_ids(ids, size)
    ]
