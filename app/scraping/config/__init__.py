"""
Config helpers for catalog crawling.
"""

from app.scraping.config.loader import get_crawl_settings
from app.scraping.config.models import CrawlSettings, ExtractorSelectors

__all__ = [
    "CrawlSettings",
    "ExtractorSelectors",
    "get_crawl_settings",
]
