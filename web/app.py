"""
FastAPI application for the hostel print desk.

Production deployment configuration via environment variables
(see utils.config.Config).
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from printdesk import (
    IntakeService,
    JsonRecordStore,
    LocalBlobStore,
    MongoRecordStore,
    PersistenceError,
    S3BlobStore,
    ValidationError,
)
from printdesk.storage import LOCAL_URL_PREFIX
from utils.config import Config
from web.intake_routes import GENERIC_ERROR_MESSAGE, render_error, router as intake_router

logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).parent
STATIC_DIR = BASE_DIR / "static"


def build_service(config: Config) -> IntakeService:
    """Wire record and blob stores from configuration."""
    if config.mongo_uri:
        records = MongoRecordStore(config.mongo_uri, database=config.mongo_db)
    else:
        records = JsonRecordStore(persist_path=config.records_path)

    if config.storage_backend == "cloud":
        blobs = S3BlobStore(
            bucket=config.cloud_name,
            folder=config.cloud_folder,
            region=config.cloud_region,
            endpoint_url=config.cloud_endpoint,
            access_key=config.cloud_key,
            secret_key=config.cloud_secret,
        )
    else:
        blobs = LocalBlobStore(storage_root=config.uploads_path)

    return IntakeService(
        records=records,
        blobs=blobs,
        require_documents=config.require_documents,
        strict_phone=config.strict_phone,
        gate_replacements=config.gate_replacements,
    )


def create_app(
    config: Optional[Config] = None,
    service: Optional[IntakeService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration (loaded from environment if omitted)
        service: Pre-built intake service (built from config if omitted)
    """
    config = config or Config.load()
    service = service or build_service(config)

    app = FastAPI(
        title="Hostel Print Desk",
        description="Printing request intake for hostel residents",
        version="0.1.0",
        debug=config.debug,
    )
    app.state.config = config
    app.state.service = service

    @app.get("/health", include_in_schema=False)
    def health():
        """Health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    @app.on_event("startup")
    async def on_startup():
        """Fail fast if the record store is unreachable."""
        try:
            await service.records.ping()
        except PersistenceError:
            logger.exception("Record store unavailable at startup")
            raise
        logger.info("Hostel print desk started (%s)", config.to_dict())

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> HTMLResponse:
        return render_error(request, exc.message, status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> HTMLResponse:
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return render_error(request, GENERIC_ERROR_MESSAGE, status_code=500)

    # Mount static files
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # Local uploads are served directly; cloud blobs carry their own URLs
    if isinstance(service.blobs, LocalBlobStore):
        app.mount(
            LOCAL_URL_PREFIX,
            StaticFiles(directory=service.blobs.storage_root),
            name="uploads",
        )

    # Include intake routes
    app.include_router(intake_router)

    return app
