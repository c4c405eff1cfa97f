"""Request and response models for the HTTP layer."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, StrictInt, field_validator

from ingestion.models import BatchStatus, IngestionOverallStatus, IngestionStatus, Priority


class IngestRequest(BaseModel):
    """Body of ``POST /ingest``. Range checks happen in the route."""
    ids: List[StrictInt] = Field(..., examples=[[1, 2, 3, 4, 5]])
    priority: Priority = Priority.MEDIUM

    @field_validator("priority", mode="before")
    @classmethod
    def _default_missing_priority(cls, value: Any) -> Any:
        # null or "" means "not given"
        return value or Priority.MEDIUM


class IngestResponse(BaseModel):
    ingestion_id: str


class BatchStatusResponse(BaseModel):
    batch_id: str
    ids: List[int]
    status: BatchStatus


class IngestionStatusResponse(BaseModel):
    ingestion_id: str
    status: IngestionOverallStatus
    batches: List[BatchStatusResponse]

    @classmethod
    def from_status(cls, status: IngestionStatus) -> "IngestionStatusResponse":
        return cls(
            ingestion_id=status.ingestion_id,
            status=status.status,
            batches=[
                BatchStatusResponse(batch_id=view.batch_id, ids=view.ids, status=view.status)
                for view in status.batches
            ],
        )


class RateLimitInfo(BaseModel):
    max_ids_per_batch: int
    batch_interval_seconds: float


class SystemOverview(BaseModel):
    system_status: str
    timestamp: str
    queue_size: int
    active_batches: int
    rate_limit_info: RateLimitInfo


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class DataPageMeta(BaseModel):
    total_records: int
    oldest_record: Optional[str] = None
    newest_record: Optional[str] = None
