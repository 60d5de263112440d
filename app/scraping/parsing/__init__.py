"""
Parsing layer exports.
"""

from app.scraping.parsing.catalog_page import CatalogPageExtractor

__all__ = ["CatalogPageExtractor"]
