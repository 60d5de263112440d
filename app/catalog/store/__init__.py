"""
Catalog store backends.
"""

from app.catalog.store.base import CatalogStore
from app.catalog.store.snapshot_store import SnapshotCatalogStore
from app.catalog.store.sqlalchemy_store import PublishedGeneration, SQLAlchemyCatalogStore

__all__ = [
    "CatalogStore",
    "PublishedGeneration",
    "SQLAlchemyCatalogStore",
    "SnapshotCatalogStore",
]
