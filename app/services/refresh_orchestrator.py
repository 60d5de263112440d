"""
app/services/refresh_orchestrator.py

Runs a full re-crawl and atomically publishes its output.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from app.catalog.snapshot_artifact import SnapshotArtifactError, write_snapshot
from app.catalog.store import CatalogStore
from app.domain.catalog import Generation, GenerationBuilder
from app.domain.errors import CrawlCancelled, RefreshInProgress
from app.domain.refresh import RefreshOutcome, RefreshStatus
from app.scraping.crawler import CatalogCrawler
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    """
    Crawl -> seal -> publish, with at most one refresh in flight.

    A second refresh requested while one runs is rejected with
    RefreshInProgress rather than queued. Crawl failure, cancellation and
    publish failure all leave the previously published generation visible.
    """

    def __init__(
        self,
        *,
        crawler_factory: Callable[[], CatalogCrawler],
        store: CatalogStore,
        snapshot_path: str | Path | None = None,
    ) -> None:
        self._crawler_factory = crawler_factory
        self._store = store
        self._snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._guard = threading.Lock()
        self._cancel_event = threading.Event()
        self._last_outcome: RefreshOutcome | None = None

    @property
    def is_running(self) -> bool:
        return self._guard.locked()

    @property
    def last_outcome(self) -> RefreshOutcome | None:
        return self._last_outcome

    def cancel(self) -> bool:
        """
        Ask the running refresh to stop before its next page fetch.

        Returns False when no refresh is running.
        """

        if not self.is_running:
            return False
        self._cancel_event.set()
        log_event(logger, logging.INFO, "refresh_cancel_requested")
        return True

    def refresh(self) -> RefreshOutcome:
        if not self._guard.acquire(blocking=False):
            log_event(logger, logging.WARNING, "refresh_rejected", reason="in_progress")
            raise RefreshInProgress("A catalog refresh is already running.")

        try:
            outcome = self._run()
            self._last_outcome = outcome
            return outcome
        finally:
            self._cancel_event.clear()
            self._guard.release()

    def _run(self) -> RefreshOutcome:
        builder = GenerationBuilder()
        log_event(logger, logging.INFO, "refresh_started", generation_id=builder.generation_id)

        try:
            crawler = self._crawler_factory()
            result = crawler.crawl(builder, cancel_event=self._cancel_event)
        except Exception as exc:
            return self._failed(RefreshStatus.FAILED, error=exc, last_locator=None)

        if not result.succeeded:
            status = (
                RefreshStatus.CANCELLED
                if isinstance(result.error, CrawlCancelled)
                else RefreshStatus.FAILED
            )
            return self._failed(
                status,
                error=result.error,
                last_locator=result.last_locator,
                pages_fetched=result.pages_fetched,
                normalization_failures=result.normalization_failures,
            )

        generation = builder.seal()
        try:
            self._store.publish(generation)
        except Exception as exc:
            return self._failed(
                RefreshStatus.FAILED,
                error=exc,
                last_locator=result.last_locator,
                pages_fetched=result.pages_fetched,
                normalization_failures=result.normalization_failures,
                duplicates_dropped=len(builder.duplicates),
            )

        self._write_artifact(generation)
        outcome = RefreshOutcome(
            status=RefreshStatus.SUCCESS,
            generation_id=generation.generation_id,
            records_published=generation.record_count,
            pages_fetched=result.pages_fetched,
            normalization_failures=result.normalization_failures,
            duplicates_dropped=len(builder.duplicates),
            last_locator=result.last_locator,
        )
        log_event(
            logger,
            logging.INFO,
            "refresh_completed",
            generation_id=outcome.generation_id,
            records_published=outcome.records_published,
            pages_fetched=outcome.pages_fetched,
            normalization_failures=outcome.normalization_failures,
            duplicates_dropped=outcome.duplicates_dropped,
        )
        return outcome

    def _failed(
        self,
        status: str,
        *,
        error: BaseException | None,
        last_locator: str | None,
        pages_fetched: int = 0,
        normalization_failures: int = 0,
        duplicates_dropped: int = 0,
    ) -> RefreshOutcome:
        message = f"{type(error).__name__}: {error}" if error is not None else "unknown error"
        log_event(
            logger,
            logging.ERROR if status == RefreshStatus.FAILED else logging.WARNING,
            "refresh_failed" if status == RefreshStatus.FAILED else "refresh_cancelled",
            last_locator=last_locator,
            pages_fetched=pages_fetched,
            error=message,
        )
        return RefreshOutcome(
            status=status,
            generation_id=None,
            records_published=0,
            pages_fetched=pages_fetched,
            normalization_failures=normalization_failures,
            duplicates_dropped=duplicates_dropped,
            last_locator=last_locator,
            error=message,
        )

    def _write_artifact(self, generation: Generation) -> None:
        if self._snapshot_path is None:
            return
        try:
            write_snapshot(generation, self._snapshot_path)
        except SnapshotArtifactError as exc:
            log_event(
                logger,
                logging.WARNING,
                "snapshot_write_failed",
                path=str(self._snapshot_path),
                error=str(exc),
            )
