"""
Data Ingestion API
==================
FastAPI app factory: wires the ingestion manager and record store into the
routes and runs the batch scheduler for the lifetime of the app.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ingestion.config import Settings, configure_logging
from ingestion.executor import WorkFunction
from ingestion.manager import IngestionManager
from ingestion.records import RecordStore
from ingestion.routes import data_router, router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, work: Optional[WorkFunction] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.manager.start()
        yield
        app.state.manager.stop()
        # Let a batch that is already running finish before the loop closes.
        await app.state.manager.scheduler.wait_idle()

    app = FastAPI(
        title="Data Ingestion API",
        description="Priority-based batch ingestion with rate limiting",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.manager = IngestionManager(settings, work=work)
    app.state.records = RecordStore(settings.max_stored_records)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.include_router(data_router)

    @app.get("/", include_in_schema=False)
    async def health() -> dict:
        return {
            "message": "Data Ingestion API",
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "ingest": "POST /ingest",
                "status": "GET /status/{ingestion_id}",
                "overview": "GET /status",
                "data": "GET /data",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings: Settings = app.state.settings
    logger.info("Server running on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
