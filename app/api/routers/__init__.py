"""
app/api/routers package marker.
"""

from app.api.routers.catalog import router as catalog_router

__all__ = [
    "catalog_router",
]
