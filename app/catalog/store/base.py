"""
Catalog store interface shared by the snapshot and persistent backends.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from app.domain.catalog import CatalogRecord, Generation, GenerationHandle, QueryResult

if TYPE_CHECKING:
    from app.catalog.query_engine import QueryPlan


class CatalogStore(ABC):
    """
    Authoritative holder of the published generation.

    `publish` is the only writer and callers serialize it. Readers take a
    handle from `current_generation()` and pass it to `execute` / `lookup`,
    so every read of one request sees exactly one generation.
    """

    backend_name: str = "abstract"

    @abstractmethod
    def publish(self, generation: Generation) -> None:
        """
        Atomically make a sealed generation the visible one.
        """

    @abstractmethod
    def current_generation(self) -> GenerationHandle:
        """
        Handle to the published generation; an empty handle before the first publish.
        """

    @abstractmethod
    def execute(self, plan: "QueryPlan", generation: GenerationHandle) -> QueryResult:
        """
        Evaluate a query plan against one generation.
        """

    @abstractmethod
    def lookup(self, key: str, generation: GenerationHandle) -> CatalogRecord | None:
        """
        Direct keyed access into one generation; None when absent.
        """

    def lookup_by_id(self, key: str) -> CatalogRecord | None:
        return self.lookup(key, self.current_generation())

    def has_published(self) -> bool:
        return self.current_generation().generation_id is not None
