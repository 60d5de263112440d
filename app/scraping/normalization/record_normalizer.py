"""
Normalization of raw extracted entries into canonical catalog records.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.parse import urljoin

from pydantic import ValidationError

from app.domain.catalog import CatalogRecord, derive_record_key, is_absolute_locator
from app.domain.errors import NormalizationError
from app.scraping.types import RawEntry

RATING_WORDS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
}

_NON_NUMERIC = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_CENTS = Decimal("0.01")
_IN_STOCK = "in stock"


class RecordNormalizer:
    """
    Convert one raw entry into a CatalogRecord or raise NormalizationError.

    Lossy rules: a price with no numeric content becomes 0.00, an unknown
    rating word becomes 0, and any availability text without "in stock"
    means out of stock.
    """

    def normalize(self, raw: RawEntry, *, base_locator: str) -> CatalogRecord:
        title = _as_text(raw.get("title"))
        if not title:
            raise NormalizationError("Entry has an empty title.", field="title", value=raw.get("title"))

        detail_locator = self._resolve(
            raw.get("detail_href"),
            base_locator=base_locator,
            field="detail_locator",
            required=True,
        )
        thumbnail_locator = self._resolve(
            raw.get("thumbnail_src"),
            base_locator=base_locator,
            field="thumbnail_locator",
            required=False,
        )
        availability_text = _as_text(raw.get("availability"))
        source_id = _as_text(raw.get("source_id"))

        try:
            return CatalogRecord(
                key=source_id or derive_record_key(detail_locator),
                title=title,
                price=self.parse_price(raw.get("price_text")),
                in_stock=self.parse_in_stock(availability_text),
                rating=self.parse_rating(raw.get("rating_class")),
                detail_locator=detail_locator,
                thumbnail_locator=thumbnail_locator,
                availability_text=availability_text,
            )
        except ValidationError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "record"
            raise NormalizationError(
                f"Invalid {field}: {first.get('msg')}",
                field=field,
                value=first.get("input"),
            ) from exc

    @staticmethod
    def parse_price(value: Any) -> Decimal:
        cleaned = _NON_NUMERIC.sub("", _as_text(value))
        match = _LEADING_NUMBER.match(cleaned)
        if match is None:
            return Decimal("0.00")
        try:
            return Decimal(match.group(0)).quantize(_CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return Decimal("0.00")

    @staticmethod
    def parse_rating(value: Any) -> int:
        for token in _as_text(value).lower().split():
            if token in RATING_WORDS:
                return RATING_WORDS[token]
        return 0

    @staticmethod
    def parse_in_stock(availability_text: str) -> bool:
        return _IN_STOCK in availability_text.lower()

    @staticmethod
    def _resolve(value: Any, *, base_locator: str, field: str, required: bool) -> str:
        relative = _as_text(value)
        if not relative:
            if required:
                raise NormalizationError(f"Entry has no {field}.", field=field, value=value)
            return ""
        resolved = urljoin(base_locator, relative)
        if not is_absolute_locator(resolved):
            raise NormalizationError(
                f"Cannot resolve {field} {relative!r} against {base_locator!r}.",
                field=field,
                value=relative,
            )
        return resolved


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
