"""
db/models/catalog.py

Versioned catalog tables for the persistent backend.

Every crawl output is written as one generation. Readers address rows by
generation id, and `catalog_state` holds the single published pointer, so a
publish is a pointer flip inside the same transaction that inserted the rows.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class GenerationStatus:
    STAGED = "staged"
    PUBLISHED = "published"
    RETIRED = "retired"


class CatalogGenerationRow(TimestampMixin, Base):
    __tablename__ = "catalog_generations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=GenerationStatus.STAGED,
        comment="staged, published, retired",
    )
    record_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CatalogRecordRow(Base):
    __tablename__ = "catalog_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    generation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("catalog_generations.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Source crawl order within the generation",
    )
    record_key: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    title_search: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Lowercased title used for substring search",
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    detail_locator: Mapped[str] = mapped_column(Text, nullable=False)
    thumbnail_locator: Mapped[str] = mapped_column(Text, nullable=False, default="")
    availability_text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        UniqueConstraint("generation_id", "record_key", name="uq_catalog_records_generation_key"),
        UniqueConstraint(
            "generation_id",
            "detail_locator",
            name="uq_catalog_records_generation_detail",
        ),
        Index("ix_catalog_records_generation_position", "generation_id", "position"),
        Index("ix_catalog_records_generation_price", "generation_id", "price"),
        Index("ix_catalog_records_generation_rating", "generation_id", "rating"),
    )


class CatalogStateRow(Base):
    """
    Single-row table holding the published generation pointer.
    """

    __tablename__ = "catalog_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    published_generation_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("catalog_generations.id"),
        nullable=True,
    )
