"""
app/repositories/catalog_record_repository.py

Persistence layer for versioned catalog generations.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, delete, func, insert, select, update
from sqlalchemy.orm import Session

from app.domain.catalog import CatalogRecord
from db.models.catalog import (
    CatalogGenerationRow,
    CatalogRecordRow,
    CatalogStateRow,
    GenerationStatus,
)

if TYPE_CHECKING:
    from app.catalog.query_engine import CatalogFilter

_DEFAULT_BATCH_SIZE = 1000
_STATE_ROW_ID = 1


class CatalogRecordRepository:
    """
    Create, bulk-insert, filter, count and keyed lookups over catalog generations.

    The repository never commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # --- generations -----------------------------------------------------

    def create_generation(self, generation_id: str) -> None:
        self._session.add(
            CatalogGenerationRow(
                id=generation_id,
                status=GenerationStatus.STAGED,
                record_count=0,
            )
        )
        self._session.flush()

    def published_generation(self) -> tuple[str, int] | None:
        stmt = (
            select(CatalogGenerationRow.id, CatalogGenerationRow.record_count)
            .join(
                CatalogStateRow,
                CatalogStateRow.published_generation_id == CatalogGenerationRow.id,
            )
            .where(CatalogStateRow.id == _STATE_ROW_ID)
        )
        row = self._session.execute(stmt).first()
        if row is None:
            return None
        return row.id, row.record_count

    def set_published(self, generation_id: str, *, record_count: int) -> None:
        """
        Flip the published pointer to `generation_id` and retire the previous one.
        """

        now = datetime.now(timezone.utc)
        self._session.execute(
            update(CatalogGenerationRow)
            .where(CatalogGenerationRow.status == GenerationStatus.PUBLISHED)
            .values(status=GenerationStatus.RETIRED)
        )
        self._session.execute(
            update(CatalogGenerationRow)
            .where(CatalogGenerationRow.id == generation_id)
            .values(
                status=GenerationStatus.PUBLISHED,
                record_count=record_count,
                published_at=now,
            )
        )

        state = self._session.get(CatalogStateRow, _STATE_ROW_ID)
        if state is None:
            self._session.add(
                CatalogStateRow(id=_STATE_ROW_ID, published_generation_id=generation_id)
            )
        else:
            state.published_generation_id = generation_id
        self._session.flush()

    def prune_generations(self, *, keep: int) -> list[str]:
        """
        Delete all but the `keep` most recently published generations, plus stale staged ones.
        """

        published = self._session.scalars(
            select(CatalogGenerationRow.id)
            .where(
                CatalogGenerationRow.status.in_(
                    [GenerationStatus.PUBLISHED, GenerationStatus.RETIRED]
                )
            )
            .order_by(CatalogGenerationRow.published_at.desc())
        ).all()
        stale = self._session.scalars(
            select(CatalogGenerationRow.id).where(
                CatalogGenerationRow.status == GenerationStatus.STAGED
            )
        ).all()
        doomed = [*published[max(1, keep) :], *stale]
        if not doomed:
            return []

        self._session.execute(
            delete(CatalogRecordRow).where(CatalogRecordRow.generation_id.in_(doomed))
        )
        self._session.execute(
            delete(CatalogGenerationRow).where(CatalogGenerationRow.id.in_(doomed))
        )
        return list(doomed)

    # --- records ---------------------------------------------------------

    def bulk_insert(
        self,
        generation_id: str,
        records: Sequence[CatalogRecord],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Insert records in crawl order, keeping their position for stable paging.
        """

        if not records:
            return 0

        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(records), size):
            chunk = records[start : start + size]
            payloads: list[dict[str, Any]] = [
                {
                    "generation_id": generation_id,
                    "position": start + offset,
                    "record_key": record.key,
                    "title": record.title,
                    "title_search": record.title.lower(),
                    "price": record.price,
                    "in_stock": record.in_stock,
                    "rating": record.rating,
                    "detail_locator": record.detail_locator,
                    "thumbnail_locator": record.thumbnail_locator,
                    "availability_text": record.availability_text,
                }
                for offset, record in enumerate(chunk)
            ]
            self._session.execute(insert(CatalogRecordRow), payloads)
            inserted += len(payloads)
        return inserted

    def count_matching(self, generation_id: str, filters: "CatalogFilter") -> int:
        stmt = (
            select(func.count())
            .select_from(CatalogRecordRow)
            .where(*self._conditions(generation_id, filters))
        )
        return int(self._session.scalar(stmt) or 0)

    def find_matching(
        self,
        generation_id: str,
        filters: "CatalogFilter",
        *,
        offset: int,
        limit: int,
    ) -> list[CatalogRecordRow]:
        stmt = (
            select(CatalogRecordRow)
            .where(*self._conditions(generation_id, filters))
            .order_by(CatalogRecordRow.position)
            .offset(offset)
            .limit(limit)
        )
        return list(self._session.scalars(stmt).all())

    def find_by_key(self, generation_id: str, key: str) -> CatalogRecordRow | None:
        stmt = select(CatalogRecordRow).where(
            CatalogRecordRow.generation_id == generation_id,
            CatalogRecordRow.record_key == key,
        )
        return self._session.scalars(stmt).first()

    @staticmethod
    def _conditions(generation_id: str, filters: "CatalogFilter") -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [CatalogRecordRow.generation_id == generation_id]
        if filters.min_price is not None:
            conditions.append(CatalogRecordRow.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(CatalogRecordRow.price <= filters.max_price)
        if filters.min_rating is not None:
            conditions.append(CatalogRecordRow.rating >= filters.min_rating)
        if filters.in_stock is not None:
            conditions.append(CatalogRecordRow.in_stock == filters.in_stock)
        needle = filters.search_needle
        if needle is not None:
            conditions.append(CatalogRecordRow.title_search.contains(needle, autoescape=True))
        return conditions


def row_to_record(row: CatalogRecordRow) -> CatalogRecord:
    return CatalogRecord(
        key=row.record_key,
        title=row.title,
        price=row.price,
        in_stock=row.in_stock,
        rating=row.rating,
        detail_locator=row.detail_locator,
        thumbnail_locator=row.thumbnail_locator,
        availability_text=row.availability_text,
    )
