"""
Priority Batch Ingestion
========================
Splits submitted ids into batches of three and processes them one batch per
rate-limit interval, highest priority first.
"""

from ingestion.config import MAX_ID_VALUE, MIN_ID_VALUE, Settings
from ingestion.manager import IngestionManager
from ingestion.models import (
    Batch,
    BatchStatus,
    Ingestion,
    IngestionError,
    IngestionOverallStatus,
    IngestionStatus,
    InvalidPriorityError,
    Priority,
)

__all__ = [
    "Batch",
    "BatchStatus",
    "Ingestion",
    "IngestionError",
    "IngestionManager",
    "IngestionOverallStatus",
    "IngestionStatus",
    "InvalidPriorityError",
    "MAX_ID_VALUE",
    "MIN_ID_VALUE",
    "Priority",
    "Settings",
]
