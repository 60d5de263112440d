"""
app/repositories package marker.
"""

from app.repositories.catalog_record_repository import CatalogRecordRepository, row_to_record

__all__ = [
    "CatalogRecordRepository",
    "row_to_record",
]
