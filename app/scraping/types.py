"""
Shared crawl runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Loosely-typed field bag produced by the page extractor.
RawEntry = dict[str, Any]


@dataclass(frozen=True)
class FetchedPage:
    """
    Content of one successfully fetched page.
    """

    locator: str
    content: str
    status_code: int


@dataclass(frozen=True)
class ExtractedPage:
    """
    Raw entries of one listing page plus the next page locator, if any.
    """

    locator: str
    entries: list[RawEntry] = field(default_factory=list)
    next_locator: str | None = None
    skipped_entries: int = 0


class CrawlState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CrawlResult:
    """
    Outcome for one crawl of the pagination chain.
    """

    state: CrawlState
    pages_fetched: int
    records_accepted: int
    normalization_failures: int
    skipped_entries: int
    last_locator: str | None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is CrawlState.DONE
