"""
In-process snapshot backend.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from app.catalog.store.base import CatalogStore
from app.domain.catalog import CatalogRecord, Generation, GenerationHandle, QueryResult
from app.scraping.logging_utils import log_event

if TYPE_CHECKING:
    from app.catalog.query_engine import QueryPlan

logger = logging.getLogger(__name__)


class SnapshotCatalogStore(CatalogStore):
    """
    Holds the published generation as an immutable in-memory object.

    Publishing swaps one reference. Readers that already took a handle keep
    the old generation alive until they drop it.
    """

    backend_name = "snapshot"

    def __init__(self, initial: Generation | None = None) -> None:
        self._current = initial or Generation.empty()
        self._publish_lock = threading.Lock()

    def publish(self, generation: Generation) -> None:
        with self._publish_lock:
            previous = self._current
            self._current = generation
        log_event(
            logger,
            logging.INFO,
            "generation_published",
            backend=self.backend_name,
            generation_id=generation.generation_id,
            record_count=generation.record_count,
            previous_generation_id=previous.generation_id,
        )

    def current_generation(self) -> Generation:
        return self._current

    def execute(self, plan: "QueryPlan", generation: GenerationHandle) -> QueryResult:
        snapshot = self._resolve(generation)
        matches = [record for record in snapshot.records if plan.filters.matches(record)]
        start = plan.offset
        return QueryResult(
            total=len(matches),
            page=plan.page,
            page_size=plan.page_size,
            items=tuple(matches[start : start + plan.page_size]),
        )

    def lookup(self, key: str, generation: GenerationHandle) -> CatalogRecord | None:
        return self._resolve(generation).lookup(key)

    def _resolve(self, generation: GenerationHandle) -> Generation:
        if not isinstance(generation, Generation):
            raise TypeError(
                f"Snapshot store expects a Generation handle, got {type(generation).__name__}."
            )
        return generation
