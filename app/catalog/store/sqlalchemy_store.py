"""
SQLAlchemy-backed persistent catalog store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.catalog.store.base import CatalogStore
from app.domain.catalog import CatalogRecord, Generation, GenerationHandle, QueryResult
from app.repositories.catalog_record_repository import CatalogRecordRepository, row_to_record
from app.scraping.logging_utils import log_event
from db.base import Base

if TYPE_CHECKING:
    from app.catalog.query_engine import QueryPlan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedGeneration:
    """
    Handle to a generation stored in the database.
    """

    generation_id: str | None
    record_count: int


EMPTY_HANDLE = PublishedGeneration(generation_id=None, record_count=0)


class SQLAlchemyCatalogStore(CatalogStore):
    """
    Persist generations as versioned row sets and publish by flipping a pointer.

    The new rows, the pointer flip and the pruning of old generations commit
    in one transaction, so readers see either the old or the new generation
    and never an empty or mixed one. The predecessor is retained
    (`retain_generations` >= 2) so in-flight readers holding its id keep
    getting consistent results.
    """

    backend_name = "persistent"

    def __init__(
        self,
        *,
        session_factory: sessionmaker,
        batch_size: int = 1000,
        retain_generations: int = 2,
    ) -> None:
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)
        self._retain_generations = max(1, retain_generations)

    def create_schema(self, engine: Engine) -> None:
        import db.models  # noqa: F401 registers catalog models on Base.metadata

        Base.metadata.create_all(engine)

    def publish(self, generation: Generation) -> None:
        if generation.generation_id is None:
            raise ValueError("Cannot publish an unsealed or empty-handle generation.")

        with self._session_factory() as session:
            repository = CatalogRecordRepository(session)
            try:
                repository.create_generation(generation.generation_id)
                inserted = repository.bulk_insert(
                    generation.generation_id,
                    generation.records,
                    batch_size=self._batch_size,
                )
                repository.set_published(generation.generation_id, record_count=inserted)
                pruned = repository.prune_generations(keep=self._retain_generations)
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                log_event(
                    logger,
                    logging.ERROR,
                    "generation_publish_failed",
                    backend=self.backend_name,
                    generation_id=generation.generation_id,
                )
                raise

        log_event(
            logger,
            logging.INFO,
            "generation_published",
            backend=self.backend_name,
            generation_id=generation.generation_id,
            record_count=inserted,
            pruned_generations=pruned,
        )

    def current_generation(self) -> PublishedGeneration:
        with self._session_factory() as session:
            published = CatalogRecordRepository(session).published_generation()
        if published is None:
            return EMPTY_HANDLE
        generation_id, record_count = published
        return PublishedGeneration(generation_id=generation_id, record_count=record_count)

    def execute(self, plan: "QueryPlan", generation: GenerationHandle) -> QueryResult:
        if generation.generation_id is None:
            return plan.empty_result()

        with self._session_factory() as session:
            repository = CatalogRecordRepository(session)
            total = repository.count_matching(generation.generation_id, plan.filters)
            if plan.offset >= total:
                items: tuple[CatalogRecord, ...] = ()
            else:
                rows = repository.find_matching(
                    generation.generation_id,
                    plan.filters,
                    offset=plan.offset,
                    limit=plan.page_size,
                )
                items = tuple(row_to_record(row) for row in rows)

        return QueryResult(
            total=total,
            page=plan.page,
            page_size=plan.page_size,
            items=items,
        )

    def lookup(self, key: str, generation: GenerationHandle) -> CatalogRecord | None:
        if generation.generation_id is None:
            return None
        with self._session_factory() as session:
            row = CatalogRecordRepository(session).find_by_key(generation.generation_id, key)
            return row_to_record(row) if row is not None else None
