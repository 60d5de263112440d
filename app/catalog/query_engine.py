"""
Backend-neutral query planning and execution.

`QueryPlan` is built once per request: clamped pagination plus one
`CatalogFilter`. Both store backends evaluate that same filter, the snapshot
store in Python and the SQLAlchemy store as SQL, so total, items and order
agree for the same generation content.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal, localcontext

from app.catalog.store.base import CatalogStore
from app.domain.catalog import CatalogQuery, CatalogRecord, GenerationHandle, QueryResult

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 200
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class CatalogFilter:
    """
    AND-composed predicates; `None` means the predicate is inactive.
    """

    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_rating: int | None = None
    in_stock: bool | None = None
    search: str | None = None

    @property
    def search_needle(self) -> str | None:
        if not self.search:
            return None
        return self.search.lower()

    def matches(self, record: CatalogRecord) -> bool:
        if self.min_price is not None and record.price < self.min_price:
            return False
        if self.max_price is not None and record.price > self.max_price:
            return False
        if self.min_rating is not None and record.rating < self.min_rating:
            return False
        if self.in_stock is not None and record.in_stock != self.in_stock:
            return False
        needle = self.search_needle
        if needle is not None and needle not in record.title.lower():
            return False
        return True


@dataclass(frozen=True)
class QueryPlan:
    filters: CatalogFilter
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def empty_result(self) -> QueryResult:
        return QueryResult(total=0, page=self.page, page_size=self.page_size, items=())


class QueryEngine:
    """
    Executes catalog queries against the store's published generation.
    """

    def __init__(
        self,
        *,
        store: CatalogStore,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._max_page_size = max(1, max_page_size)
        self._default_page_size = min(max(1, default_page_size), self._max_page_size)

    def plan(self, query: CatalogQuery) -> QueryPlan:
        page_size = query.page_size if query.page_size and query.page_size > 0 else self._default_page_size
        return QueryPlan(
            filters=CatalogFilter(
                min_price=_cent_bound(query.min_price, ROUND_CEILING),
                max_price=_cent_bound(query.max_price, ROUND_FLOOR),
                min_rating=query.min_rating,
                in_stock=query.in_stock,
                search=query.search or None,
            ),
            page=max(1, query.page or 1),
            page_size=min(page_size, self._max_page_size),
        )

    def execute(
        self,
        query: CatalogQuery,
        generation: GenerationHandle | None = None,
    ) -> QueryResult:
        """
        Run one query. Count and page slice come from a single generation handle.
        """

        handle = generation if generation is not None else self._store.current_generation()
        return self._store.execute(self.plan(query), handle)

    def lookup(
        self,
        key: str,
        generation: GenerationHandle | None = None,
    ) -> CatalogRecord | None:
        handle = generation if generation is not None else self._store.current_generation()
        return self._store.lookup(key, handle)


def _cent_bound(value: Decimal | None, rounding: str) -> Decimal | None:
    """
    Snap a price bound onto the cent grid stored prices live on.

    Lower bounds round up and upper bounds round down, so the set of matching
    records is unchanged while SQL backends that bind Numeric as float compare
    the same values Python does.
    """

    if value is None or not value.is_finite():
        return value
    _, digits, exponent = value.as_tuple()
    if exponent >= -2:
        return value
    with localcontext() as context:
        context.prec = max(context.prec, len(digits) + 2)
        return value.quantize(_CENTS, rounding=rounding)
