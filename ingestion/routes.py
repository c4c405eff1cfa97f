"""HTTP routes: priority ingestion, status polling and the record store."""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Request, status

from ingestion.config import MAX_ID_VALUE, MIN_ID_VALUE
from ingestion.manager import IngestionManager
from ingestion.models import IngestionError
from ingestion.records import MAX_PAGE_SIZE, RecordStore
from ingestion.schemas import (
    DataPageMeta,
    IngestRequest,
    IngestResponse,
    IngestionStatusResponse,
    Pagination,
    SystemOverview,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingestion"])
data_router = APIRouter(prefix="/data", tags=["data"])


def get_manager(request: Request) -> IngestionManager:
    return request.app.state.manager


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.records


# --- Priority ingestion ---
@router.post("/ingest", response_model=IngestResponse, status_code=status.HTTP_202_ACCEPTED)
async def ingest(payload: IngestRequest, request: Request) -> IngestResponse:
    """Accept ids for batched, rate-limited processing and return at once."""
    if not payload.ids:
        raise HTTPException(status_code=400, detail="ids array cannot be empty")
    for index, item_id in enumerate(payload.ids):
        if not MIN_ID_VALUE <= item_id <= MAX_ID_VALUE:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"ID {item_id} at index {index} is out of the valid range "
                    f"[{MIN_ID_VALUE}, {MAX_ID_VALUE}]"
                ),
            )

    logger.info("Received ingestion request: %d IDs with priority %s", len(payload.ids), payload.priority.value)
    manager = get_manager(request)
    try:
        ingestion_id = manager.create_ingestion(payload.ids, payload.priority)
    except IngestionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return IngestResponse(ingestion_id=ingestion_id)


@router.get("/status", response_model=SystemOverview)
async def system_status(request: Request) -> Dict[str, Any]:
    return get_manager(request).overview()


@router.get("/status/{ingestion_id}", response_model=IngestionStatusResponse)
async def ingestion_status(ingestion_id: str, request: Request) -> IngestionStatusResponse:
    try:
        canonical_id = str(uuid.UUID(ingestion_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="ingestion_id must be a valid UUID") from exc

    result = get_manager(request).get_ingestion_status(canonical_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Ingestion ID not found")
    return IngestionStatusResponse.from_status(result)


# --- Record store ---
@data_router.post("", status_code=status.HTTP_201_CREATED)
async def store_record(request: Request, payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    if not payload:
        raise HTTPException(status_code=400, detail="Request body cannot be empty")
    records = get_record_store(request)
    record = records.add(payload)
    return {
        "success": True,
        "message": "Data ingested successfully",
        "id": record["id"],
        "timestamp": record["timestamp"],
        "data_size": record["size"],
        "total_records": len(records),
    }


@data_router.get("")
async def list_records(
    request: Request,
    record_id: Optional[int] = Query(default=None, alias="id"),
    limit: int = Query(default=10, ge=1),
    offset: int = Query(default=0, ge=0),
) -> Dict[str, Any]:
    records = get_record_store(request)
    if record_id is not None:
        record = records.get(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"No record found with ID {record_id}")
        return record

    limit = min(limit, MAX_PAGE_SIZE)
    items, total = records.page(limit=limit, offset=offset)
    stats = records.stats()
    return {
        "data": items,
        "pagination": Pagination(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total
        ).model_dump(),
        "meta": DataPageMeta(
            total_records=total,
            oldest_record=stats["oldest_record"],
            newest_record=stats["newest_record"],
        ).model_dump(),
    }


@data_router.get("/stats")
async def record_stats(request: Request) -> Dict[str, Any]:
    return get_record_store(request).stats()
