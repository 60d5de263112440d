"""
app/services package marker.
"""

from app.services.catalog_service import CatalogService, get_catalog_service
from app.services.refresh_orchestrator import RefreshOrchestrator

__all__ = [
    "CatalogService",
    "RefreshOrchestrator",
    "get_catalog_service",
]
