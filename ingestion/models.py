"""
Domain Model
============
Priorities, statuses and the in-memory records for ingestions and batches.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


# --- Exceptions ---
class IngestionError(Exception):
    """Base class for errors raised by the ingestion core."""


class InvalidPriorityError(IngestionError):
    """Raised when a priority outside HIGH/MEDIUM/LOW is supplied."""

    def __init__(self, value: Any):
        self.value = value
        allowed = ", ".join(p.value for p in Priority)
        super().__init__(f"Invalid priority: {value!r}. Must be one of {allowed}")


# --- Enums ---
class Priority(str, Enum):
    """Defines the priority levels for ingestion requests."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank

    def __gt__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank > other.rank

    def __le__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank <= other.rank

    def __ge__(self, other):
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: Union["Priority", str]) -> "Priority":
        """Return the matching member or raise InvalidPriorityError."""
        if isinstance(value, Priority):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidPriorityError(value)


_PRIORITY_RANKS = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class BatchStatus(str, Enum):
    """Defines the possible statuses for individual batches."""
    YET_TO_START = "yet_to_start"
    TRIGGERED = "triggered"
    COMPLETED = "completed"
    FAILED = "failed"


class IngestionOverallStatus(str, Enum):
    """Overall status of an ingestion, derived from its batches."""
    YET_TO_START = "yet_to_start"
    TRIGGERED = "triggered"
    COMPLETED = "completed"


# Allowed forward moves; anything else would be a regression.
_TRANSITIONS = {
    BatchStatus.YET_TO_START: {BatchStatus.TRIGGERED},
    BatchStatus.TRIGGERED: {BatchStatus.COMPLETED, BatchStatus.FAILED},
    BatchStatus.COMPLETED: set(),
    BatchStatus.FAILED: set(),
}


def can_transition(current: BatchStatus, target: BatchStatus) -> bool:
    return target in _TRANSITIONS[current]


# --- Records ---
@dataclass
class Batch:
    """A contiguous slice of an ingestion's ids; the unit of execution."""

    batch_id: str
    ingestion_id: str
    ids: List[int]
    priority: Priority
    created_at: float
    status: BatchStatus = BatchStatus.YET_TO_START
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    results: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class Ingestion:
    """One client submission. Its status is never stored, see aggregate_status."""

    ingestion_id: str
    ids: List[int]
    priority: Priority
    created_at: float
    batch_ids: List[str]


@dataclass(frozen=True)
class BatchView:
    batch_id: str
    ids: List[int]
    status: BatchStatus


@dataclass(frozen=True)
class IngestionStatus:
    """Point-in-time status of an ingestion and its batches in creation order."""

    ingestion_id: str
    status: IngestionOverallStatus
    batches: List[BatchView]
