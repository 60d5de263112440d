"""
app/api/routers/catalog.py

Catalog query, lookup and refresh endpoints.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import require_refresh_token
from app.domain.catalog import CatalogQuery
from app.domain.errors import RefreshInProgress
from app.schemas.catalog import BookResponse, PaginatedBooksResponse, RefreshOutcomeResponse
from app.services.catalog_service import CatalogService, get_catalog_service

router = APIRouter(prefix="/api", tags=["catalog"])


def _parse_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_decimal(value: str | None) -> Decimal | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def _parse_bool(value: str | None) -> bool | None:
    normalized = (value or "").strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    return None


@router.get("/books", response_model=PaginatedBooksResponse)
def list_books(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    rating: str | None = Query(default=None, description="Minimum star rating"),
    in_stock: str | None = Query(default=None, alias="inStock"),
    search: str | None = Query(default=None, description="Case-insensitive title substring"),
    service: CatalogService = Depends(get_catalog_service),
) -> PaginatedBooksResponse:
    """
    Filter, search and paginate the published catalog.

    Unparsable filter values are treated as unset.
    """

    result = service.query_engine.execute(
        CatalogQuery(
            page=_parse_int(page) or 1,
            page_size=_parse_int(limit),
            min_price=_parse_decimal(min_price),
            max_price=_parse_decimal(max_price),
            min_rating=_parse_int(rating),
            in_stock=_parse_bool(in_stock),
            search=search.strip() if search and search.strip() else None,
        )
    )
    return PaginatedBooksResponse(
        total=result.total,
        page=result.page,
        limit=result.page_size,
        total_pages=result.total_pages,
        items=[BookResponse.from_record(record) for record in result.items],
    )


@router.get("/books/{book_id}", response_model=BookResponse)
def get_book(
    book_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> BookResponse:
    record = service.query_engine.lookup(book_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return BookResponse.from_record(record)


@router.post(
    "/refresh",
    response_model=RefreshOutcomeResponse,
    dependencies=[Depends(require_refresh_token)],
)
def refresh_catalog(
    service: CatalogService = Depends(get_catalog_service),
) -> RefreshOutcomeResponse:
    """
    Run one full re-crawl synchronously and return its outcome.
    """

    try:
        outcome = service.orchestrator.refresh()
    except RefreshInProgress as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return RefreshOutcomeResponse.from_outcome(outcome)
