"""
app/domain/catalog.py

Canonical catalog record, generations and query value objects.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.errors import DuplicateKeyError
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


def is_absolute_locator(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def derive_record_key(detail_locator: str) -> str:
    """
    Stable identity derived from the canonical detail locator.
    """

    return str(uuid.uuid5(uuid.NAMESPACE_URL, detail_locator))


class CatalogRecord(BaseModel):
    """
    Validated, typed representation of one catalog entry.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    in_stock: bool
    rating: int = Field(..., ge=0, le=5)
    detail_locator: str
    thumbnail_locator: str = ""
    availability_text: str = ""

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @field_validator("detail_locator")
    @classmethod
    def _detail_is_absolute(cls, value: str) -> str:
        if not is_absolute_locator(value):
            raise ValueError(f"detail_locator must be an absolute URI, got {value!r}")
        return value

    @field_validator("thumbnail_locator")
    @classmethod
    def _thumbnail_is_absolute_or_empty(cls, value: str) -> str:
        if value and not is_absolute_locator(value):
            raise ValueError(f"thumbnail_locator must be empty or an absolute URI, got {value!r}")
        return value


class GenerationHandle(Protocol):
    """
    What a reader holds to address one generation in a store.
    """

    @property
    def generation_id(self) -> str | None: ...

    @property
    def record_count(self) -> int: ...


@dataclass(frozen=True)
class Generation:
    """
    Immutable, fully-formed set of records produced by one crawl.
    """

    generation_id: str | None
    records: tuple[CatalogRecord, ...]
    created_at: datetime
    _by_key: dict[str, CatalogRecord] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_key", {record.key: record for record in self.records})

    @classmethod
    def empty(cls) -> "Generation":
        return cls(generation_id=None, records=(), created_at=datetime.now(timezone.utc))

    @property
    def record_count(self) -> int:
        return len(self.records)

    def lookup(self, key: str) -> CatalogRecord | None:
        return self._by_key.get(key)


class GenerationBuilder:
    """
    Staged generation filled while a crawl runs.

    Records are accepted in crawl order. Uniqueness of keys and detail
    locators is enforced once, in `seal()`: the first occurrence wins and
    later duplicates are dropped and reported in `duplicates`.
    """

    def __init__(self, *, generation_id: str | None = None) -> None:
        self.generation_id = generation_id or uuid.uuid4().hex
        self.created_at = datetime.now(timezone.utc)
        self.duplicates: list[DuplicateKeyError] = []
        self._records: list[CatalogRecord] = []
        self._sealed: Generation | None = None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def is_sealed(self) -> bool:
        return self._sealed is not None

    def add(self, record: CatalogRecord) -> None:
        if self._sealed is not None:
            raise RuntimeError(f"Generation {self.generation_id} is sealed.")
        self._records.append(record)

    def extend(self, records: Iterable[CatalogRecord]) -> None:
        for record in records:
            self.add(record)

    def seal(self) -> Generation:
        if self._sealed is not None:
            return self._sealed

        seen_keys: set[str] = set()
        seen_locators: set[str] = set()
        accepted: list[CatalogRecord] = []
        for record in self._records:
            if record.key in seen_keys or record.detail_locator in seen_locators:
                duplicate = DuplicateKeyError(
                    f"Duplicate record dropped key={record.key} detail={record.detail_locator}",
                    key=record.key,
                    detail_locator=record.detail_locator,
                )
                self.duplicates.append(duplicate)
                log_event(
                    logger,
                    logging.WARNING,
                    "duplicate_record_dropped",
                    generation_id=self.generation_id,
                    key=record.key,
                    detail_locator=record.detail_locator,
                )
                continue
            seen_keys.add(record.key)
            seen_locators.add(record.detail_locator)
            accepted.append(record)

        self._sealed = Generation(
            generation_id=self.generation_id,
            records=tuple(accepted),
            created_at=self.created_at,
        )
        return self._sealed


@dataclass(frozen=True)
class CatalogQuery:
    """
    Filter, search and pagination request against one generation.

    Unset filters are `None`. Page and page size are clamped by the query
    engine, not here.
    """

    page: int = 1
    page_size: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_rating: int | None = None
    in_stock: bool | None = None
    search: str | None = None


@dataclass(frozen=True)
class QueryResult:
    """
    One page of matches plus the total, both taken from the same generation.
    """

    total: int
    page: int
    page_size: int
    items: tuple[CatalogRecord, ...] = ()

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.page_size)
