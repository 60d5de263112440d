"""
Crawl configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExtractorSelectors:
    """
    CSS selectors describing one catalog listing page.
    """

    listing_container: str = "ol.row"
    entry: str = "article.product_pod"
    detail_link: str = "h3 a"
    price: str = ".price_color"
    availability: str = ".availability"
    rating: str = ".star-rating"
    thumbnail: str = ".image_container img"
    next_link: str = "li.next a"


@dataclass(frozen=True)
class CrawlSettings:
    """
    Runtime settings for the catalog crawler and its HTTP fetcher.
    """

    entry_url: str
    user_agent: str
    timeout_seconds: float
    max_retries: int
    backoff_initial_seconds: float
    backoff_multiplier: float
    page_delay_seconds: float
    max_pages: int
