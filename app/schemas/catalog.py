"""
app/schemas/catalog.py

Response schemas for the catalog query, lookup and refresh endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.catalog import CatalogRecord
from app.domain.refresh import RefreshOutcome


class BookResponse(BaseModel):
    """
    API shape of one catalog record.
    """

    id: str
    title: str
    price: float = Field(..., ge=0)
    inStock: bool
    availabilityText: str
    rating: int = Field(..., ge=0, le=5)
    detailUrl: str
    thumbnail: str

    @classmethod
    def from_record(cls, record: CatalogRecord) -> "BookResponse":
        return cls(
            id=record.key,
            title=record.title,
            price=float(record.price),
            inStock=record.in_stock,
            availabilityText=record.availability_text,
            rating=record.rating,
            detailUrl=record.detail_locator,
            thumbnail=record.thumbnail_locator,
        )


class PaginatedBooksResponse(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    items: list[BookResponse] = Field(default_factory=list)


class RefreshTokenRequest(BaseModel):
    token: str | None = None


class RefreshOutcomeResponse(BaseModel):
    """
    API response model for one refresh run.
    """

    status: str
    generation_id: str | None = None
    records_published: int = Field(..., ge=0)
    pages_fetched: int = Field(..., ge=0)
    normalization_failures: int = Field(..., ge=0)
    duplicates_dropped: int = Field(..., ge=0)
    last_locator: str | None = None
    error: str | None = None

    @classmethod
    def from_outcome(cls, outcome: RefreshOutcome) -> "RefreshOutcomeResponse":
        return cls(
            status=outcome.status,
            generation_id=outcome.generation_id,
            records_published=outcome.records_published,
            pages_fetched=outcome.pages_fetched,
            normalization_failures=outcome.normalization_failures,
            duplicates_dropped=outcome.duplicates_dropped,
            last_locator=outcome.last_locator,
            error=outcome.error,
        )


class HealthResponse(BaseModel):
    ok: bool
    backend: str
    published_records: int = Field(..., ge=0)
