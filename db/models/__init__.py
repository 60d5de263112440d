"""
Model package exports.

Import all SQLAlchemy models here so metadata registration works without
extra imports.
"""

from db.models.catalog import (
    CatalogGenerationRow,
    CatalogRecordRow,
    CatalogStateRow,
    GenerationStatus,
)

__all__ = [
    "CatalogGenerationRow",
    "CatalogRecordRow",
    "CatalogStateRow",
    "GenerationStatus",
]
