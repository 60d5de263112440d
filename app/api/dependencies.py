"""
app/api/dependencies.py

Shared FastAPI dependencies for the catalog endpoints.
"""

from __future__ import annotations

import secrets

from fastapi import Body, Depends, Header, HTTPException, status

from app.schemas.catalog import RefreshTokenRequest
from app.services.catalog_service import CatalogService, get_catalog_service


def require_refresh_token(
    x_refresh_token: str | None = Header(default=None),
    payload: RefreshTokenRequest | None = Body(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> None:
    """
    Reject refresh requests whose token does not match CATALOG_REFRESH_TOKEN.

    No token is required when CATALOG_REFRESH_TOKEN is unset.
    """

    expected = service.settings.refresh_token
    if not expected:
        return

    provided = x_refresh_token or (payload.token if payload is not None else None) or ""
    if not secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
