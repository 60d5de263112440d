from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI

from app.domain.errors import RefreshInProgress
from app.schemas.catalog import HealthResponse
from app.scraping.logging_utils import configure_logging, log_event
from app.services.catalog_service import CatalogService, get_catalog_service

logger = logging.getLogger(__name__)


def _refresh_in_background(service: CatalogService) -> threading.Thread:
    """
    Start a startup refresh without blocking the serving loop.
    """

    def _run() -> None:
        try:
            service.orchestrator.refresh()
        except RefreshInProgress:
            log_event(logger, logging.INFO, "startup_refresh_skipped", reason="in_progress")

    thread = threading.Thread(target=_run, name="catalog-startup-refresh", daemon=True)
    thread.start()
    return thread


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Seed the store from the snapshot artifact and optionally start a refresh on boot."""
    service = get_catalog_service()
    seeded = service.bootstrap()
    log_event(
        logger,
        logging.INFO,
        "catalog_ready",
        backend=service.store.backend_name,
        seeded_from_snapshot=seeded,
        published_records=service.store.current_generation().record_count,
    )

    if service.settings.refresh_on_startup:
        _refresh_in_background(service)
    try:
        yield
    finally:
        if service.orchestrator.cancel():
            log_event(logger, logging.INFO, "startup_refresh_cancelled")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging()

    application = FastAPI(
        title="Catalog Crawler API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import catalog_router

    application.include_router(catalog_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(service: CatalogService = Depends(get_catalog_service)) -> HealthResponse:
        return HealthResponse(
            ok=True,
            backend=service.store.backend_name,
            published_records=service.store.current_generation().record_count,
        )

    return application


app = create_app()
