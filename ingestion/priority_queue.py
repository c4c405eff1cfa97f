"""
Batch Priority Queue
====================
Heap of batches that have not been dequeued yet, ranked by priority
(highest first) and then by creation time (earliest first).
"""

import heapq
import itertools
import logging
import threading
from typing import List, Optional, Tuple

from ingestion.models import Batch

logger = logging.getLogger(__name__)

_Entry = Tuple[int, float, int, Batch]


class BatchQueue:
    """Thread-safe priority queue of pending batches.

    Entries are keyed by ``(-rank, created_at, seq)``. The insertion sequence
    keeps batches of one ingestion, which share a creation time, in id order
    and means ``Batch`` objects themselves are never compared.
    """

    def __init__(self) -> None:
        self._heap: List[_Entry] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def enqueue(self, batch: Batch) -> None:
        entry = (-batch.priority.rank, batch.created_at, next(self._counter), batch)
        with self._lock:
            heapq.heappush(self._heap, entry)
            size = len(self._heap)
        logger.debug("Queued batch %s (%s). Queue size: %d", batch.batch_id, batch.priority.value, size)

    def dequeue_next(self) -> Optional[Batch]:
        """Pop the highest-ranked batch, or return None when nothing waits."""
        with self._lock:
            if not self._heap:
                return None
            return heapq.heappop(self._heap)[-1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)

    def __bool__(self) -> bool:
        return len(self) > 0
