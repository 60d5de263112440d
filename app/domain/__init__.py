"""
app/domain package marker.
"""

from app.domain.catalog import (
    CatalogQuery,
    CatalogRecord,
    Generation,
    GenerationBuilder,
    GenerationHandle,
    QueryResult,
)
from app.domain.errors import (
    CatalogError,
    CrawlCancelled,
    DuplicateKeyError,
    FetchError,
    NormalizationError,
    PageParseError,
    PaginationLimitError,
    RefreshInProgress,
)
from app.domain.refresh import RefreshOutcome, RefreshStatus

__all__ = [
    "CatalogError",
    "CatalogQuery",
    "CatalogRecord",
    "CrawlCancelled",
    "DuplicateKeyError",
    "FetchError",
    "Generation",
    "GenerationBuilder",
    "GenerationHandle",
    "NormalizationError",
    "PageParseError",
    "PaginationLimitError",
    "QueryResult",
    "RefreshInProgress",
    "RefreshOutcome",
    "RefreshStatus",
]
