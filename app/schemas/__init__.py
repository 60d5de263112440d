"""
app/schemas package marker.
"""

from app.schemas.catalog import (
    BookResponse,
    HealthResponse,
    PaginatedBooksResponse,
    RefreshOutcomeResponse,
    RefreshTokenRequest,
)

__all__ = [
    "BookResponse",
    "HealthResponse",
    "PaginatedBooksResponse",
    "RefreshOutcomeResponse",
    "RefreshTokenRequest",
]
