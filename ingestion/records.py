"""
Record Store
============
Bounded key-value store behind the ``/data`` endpoints. Unrelated to batch
scheduling; it only shares the HTTP layer.
"""

import json
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Tuple

from ingestion.config import DEFAULT_MAX_STORED_RECORDS

MAX_PAGE_SIZE = 100


class RecordStore:
    """Keeps the newest ``max_records`` payloads with a monotonically growing id."""

    def __init__(self, max_records: int = DEFAULT_MAX_STORED_RECORDS) -> None:
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self._records: Deque[Dict[str, Any]] = deque(maxlen=max_records)
        self._counter = 0
        self._lock = threading.Lock()

    def add(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Store ``payload`` and return the stored record."""
        size = len(json.dumps(payload, separators=(",", ":")))
        with self._lock:
            self._counter += 1
            record = {
                "id": self._counter,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "original_payload": payload,
                "processed": True,
                "size": size,
            }
            self._records.append(record)
        return record

    def get(self, record_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            for record in self._records:
                if record["id"] == record_id:
                    return record
        return None

    def page(self, limit: int = 10, offset: int = 0) -> Tuple[List[Dict[str, Any]], int]:
        """Newest-first slice plus the total number of stored records."""
        limit = max(0, min(limit, MAX_PAGE_SIZE))
        offset = max(0, offset)
        with self._lock:
            newest_first = list(reversed(self._records))
        return newest_first[offset:offset + limit], len(newest_first)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            records = list(self._records)
        total = len(records)
        total_size = sum(record["size"] for record in records)
        return {
            "total_records": total,
            "total_size": total_size,
            "average_size": round(total_size / total) if total else 0,
            "oldest_record": records[0]["timestamp"] if records else None,
            "newest_record": records[-1]["timestamp"] if records else None,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
