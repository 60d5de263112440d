"""
app/services/catalog_service.py

Wires the configured store backend, query engine and refresh orchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import lru_cache

from app.catalog.query_engine import QueryEngine
from app.catalog.snapshot_artifact import SnapshotArtifactError, load_snapshot
from app.catalog.store import CatalogStore, SnapshotCatalogStore, SQLAlchemyCatalogStore
from app.config import BACKEND_PERSISTENT, CatalogSettings, get_catalog_settings
from app.scraping.config import CrawlSettings, get_crawl_settings
from app.scraping.crawler import CatalogCrawler
from app.scraping.fetcher import HttpPageFetcher
from app.scraping.logging_utils import log_event
from app.scraping.rate_limiter import DomainRateLimiter
from app.services.refresh_orchestrator import RefreshOrchestrator

logger = logging.getLogger(__name__)


def build_store(settings: CatalogSettings) -> CatalogStore:
    """
    Select the store backend once, from configuration.
    """

    if settings.backend == BACKEND_PERSISTENT:
        from db.session import get_engine, get_session_factory

        store = SQLAlchemyCatalogStore(
            session_factory=get_session_factory(),
            batch_size=settings.storage_batch_size,
            retain_generations=settings.retain_generations,
        )
        store.create_schema(get_engine())
        return store
    return SnapshotCatalogStore()


def build_crawler_factory(settings: CrawlSettings) -> Callable[[], CatalogCrawler]:
    def _factory() -> CatalogCrawler:
        return CatalogCrawler(
            entry_locator=settings.entry_url,
            fetcher=HttpPageFetcher(settings=settings),
            rate_limiter=DomainRateLimiter(min_interval_seconds=settings.page_delay_seconds),
            max_pages=settings.max_pages,
        )

    return _factory


class CatalogService:
    """
    Holds the three capabilities the serving layer consumes.
    """

    def __init__(
        self,
        *,
        settings: CatalogSettings,
        store: CatalogStore,
        crawler_factory: Callable[[], CatalogCrawler],
    ) -> None:
        self.settings = settings
        self.store = store
        self.query_engine = QueryEngine(
            store=store,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        )
        self.orchestrator = RefreshOrchestrator(
            crawler_factory=crawler_factory,
            store=store,
            snapshot_path=settings.snapshot_path,
        )

    def bootstrap(self) -> bool:
        """
        Publish the snapshot artifact when nothing is published yet.

        Returns True when a generation was loaded from the artifact.
        """

        if self.store.has_published():
            return False
        try:
            generation = load_snapshot(self.settings.snapshot_path)
        except SnapshotArtifactError as exc:
            log_event(
                logger,
                logging.WARNING,
                "snapshot_bootstrap_skipped",
                path=self.settings.snapshot_path,
                error=str(exc),
            )
            return False
        if generation is None:
            return False
        self.store.publish(generation)
        return True


@lru_cache(maxsize=1)
def get_catalog_service() -> CatalogService:
    """
    Build and cache the catalog service from environment settings.
    """

    settings = get_catalog_settings()
    return CatalogService(
        settings=settings,
        store=build_store(settings),
        crawler_factory=build_crawler_factory(get_crawl_settings()),
    )
