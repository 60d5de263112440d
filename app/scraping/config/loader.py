"""
Environment loader for crawl settings.
"""

from __future__ import annotations

from functools import lru_cache

from app.config import env_float, env_int, env_str
from app.scraping.config.models import CrawlSettings

DEFAULT_ENTRY_URL = "https://books.toscrape.com/"
DEFAULT_USER_AGENT = "BookCatalogBot/1.0 (+https://books.toscrape.com/)"


@lru_cache(maxsize=1)
def get_crawl_settings() -> CrawlSettings:
    """
    Return cached crawl settings from environment variables.
    """

    return CrawlSettings(
        entry_url=env_str("CATALOG_ENTRY_URL", DEFAULT_ENTRY_URL),
        user_agent=env_str("CATALOG_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=env_float("CATALOG_FETCH_TIMEOUT_SECONDS", 15.0, minimum=1.0),
        max_retries=env_int("CATALOG_FETCH_MAX_RETRIES", 2, minimum=0),
        backoff_initial_seconds=env_float(
            "CATALOG_FETCH_BACKOFF_INITIAL_SECONDS",
            0.5,
            minimum=0.0,
        ),
        backoff_multiplier=env_float("CATALOG_FETCH_BACKOFF_MULTIPLIER", 2.0, minimum=1.0),
        page_delay_seconds=env_float("CATALOG_PAGE_DELAY_SECONDS", 0.3, minimum=0.0),
        max_pages=env_int("CATALOG_MAX_PAGES", 1000, minimum=1),
    )
