"""
Catalog crawler.

Walks the pagination chain page by page:
Idle -> Fetching(locator) -> Extracting -> {Fetching(next) | Done | Failed}.
"""

from __future__ import annotations

import logging
import threading

from app.domain.catalog import GenerationBuilder
from app.domain.errors import CatalogError, CrawlCancelled, NormalizationError, PaginationLimitError
from app.scraping.fetcher import PageFetcher
from app.scraping.logging_utils import log_event
from app.scraping.normalization import RecordNormalizer
from app.scraping.parsing import CatalogPageExtractor
from app.scraping.rate_limiter import DomainRateLimiter
from app.scraping.types import CrawlResult, CrawlState, ExtractedPage

logger = logging.getLogger(__name__)


class CatalogCrawler:
    """
    Drives the page extractor across the pagination chain into a staged generation.

    Any fetch, parse, pagination-bound or cancellation error ends the crawl in
    the Failed state. Entry-level normalization errors are counted and logged.
    """

    def __init__(
        self,
        *,
        entry_locator: str,
        fetcher: PageFetcher,
        extractor: CatalogPageExtractor | None = None,
        normalizer: RecordNormalizer | None = None,
        rate_limiter: DomainRateLimiter | None = None,
        max_pages: int = 1000,
    ) -> None:
        self.entry_locator = entry_locator
        self.fetcher = fetcher
        self.extractor = extractor or CatalogPageExtractor()
        self.normalizer = normalizer or RecordNormalizer()
        self.rate_limiter = rate_limiter or DomainRateLimiter(min_interval_seconds=0.0)
        self.max_pages = max(1, max_pages)
        self.state = CrawlState.IDLE

    def crawl(
        self,
        builder: GenerationBuilder,
        *,
        cancel_event: threading.Event | None = None,
    ) -> CrawlResult:
        locator: str | None = self.entry_locator
        last_locator: str | None = None
        visited: set[str] = set()
        pages_fetched = 0
        normalization_failures = 0
        skipped_entries = 0

        try:
            while locator is not None:
                if cancel_event is not None and cancel_event.is_set():
                    raise CrawlCancelled("Crawl cancelled between pages.", locator=locator)
                if locator in visited:
                    raise PaginationLimitError(
                        f"Pagination cycle detected at {locator}",
                        locator=locator,
                    )
                if pages_fetched >= self.max_pages:
                    raise PaginationLimitError(
                        f"Pagination exceeded {self.max_pages} pages at {locator}",
                        locator=locator,
                    )

                self._transition(CrawlState.FETCHING, locator=locator)
                last_locator = locator
                visited.add(locator)
                self.rate_limiter.wait(url=locator)
                page = self.fetcher.fetch(locator)
                pages_fetched += 1

                self._transition(CrawlState.EXTRACTING, locator=locator)
                extracted = self.extractor.extract(page.content, locator=page.locator)
                skipped_entries += extracted.skipped_entries
                normalization_failures += self._normalize_page(extracted, builder)
                log_event(
                    logger,
                    logging.INFO,
                    "page_crawled",
                    locator=locator,
                    entries=len(extracted.entries),
                    records_total=len(builder),
                    next_locator=extracted.next_locator,
                )
                locator = extracted.next_locator
        except CatalogError as exc:
            self._transition(CrawlState.FAILED, locator=last_locator, error=str(exc))
            return CrawlResult(
                state=CrawlState.FAILED,
                pages_fetched=pages_fetched,
                records_accepted=len(builder),
                normalization_failures=normalization_failures,
                skipped_entries=skipped_entries,
                last_locator=last_locator,
                error=exc,
            )

        self._transition(CrawlState.DONE, locator=last_locator)
        return CrawlResult(
            state=CrawlState.DONE,
            pages_fetched=pages_fetched,
            records_accepted=len(builder),
            normalization_failures=normalization_failures,
            skipped_entries=skipped_entries,
            last_locator=last_locator,
        )

    def _normalize_page(self, extracted: ExtractedPage, builder: GenerationBuilder) -> int:
        failures = 0
        for raw in extracted.entries:
            try:
                builder.add(self.normalizer.normalize(raw, base_locator=extracted.locator))
            except NormalizationError as exc:
                failures += 1
                log_event(
                    logger,
                    logging.WARNING,
                    "entry_normalization_failed",
                    locator=extracted.locator,
                    field=exc.field,
                    error=str(exc),
                )
        return failures

    def _transition(self, state: CrawlState, **fields: object) -> None:
        self.state = state
        level = logging.ERROR if state is CrawlState.FAILED else logging.DEBUG
        if state is CrawlState.DONE:
            level = logging.INFO
        log_event(logger, level, "crawl_state_changed", state=state.value, **fields)
