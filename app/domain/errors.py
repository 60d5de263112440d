"""
app/domain/errors.py

Error taxonomy for the catalog crawl, store and refresh flows.

Entry-level defects (NormalizationError, DuplicateKeyError) are absorbed and
logged. Page and fetch level defects abort a refresh and leave the last good
generation published.
"""

from __future__ import annotations

from typing import Any


class CatalogError(Exception):
    """Base exception for catalog pipeline failures."""


class PageParseError(CatalogError):
    """Raised when a fetched page cannot be parsed as a catalog listing."""

    def __init__(self, message: str, *, locator: str) -> None:
        super().__init__(message)
        self.locator = locator


class NormalizationError(CatalogError):
    """Raised when one raw entry cannot become a canonical record."""

    def __init__(self, message: str, *, field: str, value: Any = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class FetchError(CatalogError):
    """Raised when a page fetch fails, including timeouts and non-success statuses."""

    def __init__(self, message: str, *, locator: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.locator = locator
        self.status_code = status_code


class PaginationLimitError(FetchError):
    """Raised when the pagination chain exceeds the page bound or revisits a locator."""


class CrawlCancelled(CatalogError):
    """Raised when a crawl observes a cancellation request between pages."""

    def __init__(self, message: str, *, locator: str | None = None) -> None:
        super().__init__(message)
        self.locator = locator


class DuplicateKeyError(CatalogError):
    """Describes a record dropped at seal time because its identity was already taken."""

    def __init__(self, message: str, *, key: str, detail_locator: str) -> None:
        super().__init__(message)
        self.key = key
        self.detail_locator = detail_locator


class RefreshInProgress(CatalogError):
    """Raised when a refresh is requested while another one is running."""
