"""
BeautifulSoup-based extractor for catalog listing pages.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from app.domain.errors import PageParseError
from app.scraping.config.models import ExtractorSelectors
from app.scraping.logging_utils import log_event
from app.scraping.types import ExtractedPage, RawEntry

logger = logging.getLogger(__name__)


class CatalogPageExtractor:
    """
    Turns one fetched listing page into raw entries and a next-page locator.

    A malformed entry is skipped; a page that is not a listing at all raises
    PageParseError.
    """

    def __init__(self, selectors: ExtractorSelectors | None = None) -> None:
        self.selectors = selectors or ExtractorSelectors()

    def extract(self, content: str | bytes, *, locator: str) -> ExtractedPage:
        soup = self._parse(content, locator=locator)

        nodes = soup.select(self.selectors.entry)
        if not nodes and soup.select_one(self.selectors.listing_container) is None:
            raise PageParseError(
                f"No catalog listing found at {locator}",
                locator=locator,
            )

        entries: list[RawEntry] = []
        skipped = 0
        for position, node in enumerate(nodes):
            try:
                entries.append(self._extract_entry(node))
            except ValueError as exc:
                skipped += 1
                log_event(
                    logger,
                    logging.WARNING,
                    "entry_skipped",
                    locator=locator,
                    position=position,
                    error=str(exc),
                )

        return ExtractedPage(
            locator=locator,
            entries=entries,
            next_locator=self._next_locator(soup, locator=locator),
            skipped_entries=skipped,
        )

    @staticmethod
    def _parse(content: str | bytes, *, locator: str) -> BeautifulSoup:
        if isinstance(content, bytes):
            content = content.decode("utf-8", errors="replace")
        if not isinstance(content, str) or not content.strip():
            raise PageParseError(f"Empty page content at {locator}", locator=locator)
        try:
            return BeautifulSoup(content, "html.parser")
        except Exception as exc:
            raise PageParseError(f"Unparsable page at {locator}: {exc}", locator=locator) from exc

    def _extract_entry(self, node: Tag) -> RawEntry:
        anchor = node.select_one(self.selectors.detail_link)
        href = anchor.get("href") if anchor is not None else None
        if not isinstance(href, str) or not href.strip():
            raise ValueError("entry has no detail link")

        title = anchor.get("title")
        if not isinstance(title, str) or not title.strip():
            title = anchor.get_text(" ", strip=True)

        rating_node = node.select_one(self.selectors.rating)
        rating_class = " ".join(rating_node.get("class", [])) if rating_node is not None else ""

        thumbnail_node = node.select_one(self.selectors.thumbnail)
        thumbnail_src = thumbnail_node.get("src") if thumbnail_node is not None else None

        return {
            "title": _clean_text(title),
            "price_text": self._text_of(node, self.selectors.price),
            "availability": self._text_of(node, self.selectors.availability),
            "rating_class": rating_class,
            "detail_href": href.strip(),
            "thumbnail_src": thumbnail_src.strip() if isinstance(thumbnail_src, str) else "",
        }

    def _next_locator(self, soup: BeautifulSoup, *, locator: str) -> str | None:
        anchor = soup.select_one(self.selectors.next_link)
        if anchor is None:
            return None
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip():
            return None
        return urljoin(locator, href.strip())

    @staticmethod
    def _text_of(node: Tag, selector: str) -> str:
        found = node.select_one(selector)
        if found is None:
            return ""
        return _clean_text(found.get_text(" ", strip=True))


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", value).strip()
