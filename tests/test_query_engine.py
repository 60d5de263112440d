"""
tests/test_query_engine.py

Pytest tests for QueryEngine planning and execution on both backends.

Coverage
--------
- Page and page-size clamping
- Filter composition against a hand-built fixture
- Price/rating scenario: total independent of page size
- Case-insensitive substring search, including LIKE wildcards
- Pagination completeness
- Backend equivalence over a representative query set
"""

from __future__ import annotations

import itertools
from decimal import Decimal

import pytest

from app.catalog.query_engine import QueryEngine
from app.catalog.store import SnapshotCatalogStore, SQLAlchemyCatalogStore
from app.domain.catalog import CatalogQuery, CatalogRecord
from conftest import make_generation, make_record


def _fixture_records() -> list[CatalogRecord]:
    return [
        make_record("sapiens", title="Sapiens", price="24.99", rating=4, in_stock=True),
        make_record("dune", title="Dune", price="9.99", rating=5, in_stock=True),
        make_record("emma", title="Emma", price="30.00", rating=4, in_stock=False),
        make_record("ulysses", title="Ulysses", price="35.50", rating=5, in_stock=True),
        make_record("the-hobbit", title="The Hobbit", price="10.00", rating=3, in_stock=True),
    ]


def _keys(records: tuple[CatalogRecord, ...]) -> list[str]:
    return [record.title for record in records]


@pytest.fixture()
def engine(any_store) -> QueryEngine:
    any_store.publish(make_generation(_fixture_records()))
    return QueryEngine(store=any_store, default_page_size=20, max_page_size=3)


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


class TestPlanning:
    @pytest.fixture()
    def planner(self, snapshot_store: SnapshotCatalogStore) -> QueryEngine:
        return QueryEngine(store=snapshot_store, default_page_size=20, max_page_size=200)

    @pytest.mark.parametrize(
        ("page", "page_size", "expected_page", "expected_size"),
        [
            (1, None, 1, 20),
            (0, 10, 1, 10),
            (-4, 10, 1, 10),
            (3, 0, 3, 20),
            (2, -5, 2, 20),
            (1, 500, 1, 200),
            (7, 200, 7, 200),
        ],
    )
    def test_clamping(
        self,
        planner: QueryEngine,
        page: int,
        page_size: int | None,
        expected_page: int,
        expected_size: int,
    ) -> None:
        plan = planner.plan(CatalogQuery(page=page, page_size=page_size))
        assert (plan.page, plan.page_size) == (expected_page, expected_size)

    def test_offset(self, planner: QueryEngine) -> None:
        assert planner.plan(CatalogQuery(page=3, page_size=10)).offset == 20

    @pytest.mark.parametrize(
        ("min_price", "max_price", "expected_min", "expected_max"),
        [
            (Decimal("24.990000000000000001"), Decimal("25.009"), Decimal("25.00"), Decimal("25.00")),
            (Decimal("10.005"), Decimal("10.005"), Decimal("10.01"), Decimal("10.00")),
            (Decimal("9.5"), Decimal("30"), Decimal("9.5"), Decimal("30")),
            (None, None, None, None),
        ],
    )
    def test_price_bounds_snap_to_cents(
        self,
        planner: QueryEngine,
        min_price: Decimal | None,
        max_price: Decimal | None,
        expected_min: Decimal | None,
        expected_max: Decimal | None,
    ) -> None:
        filters = planner.plan(CatalogQuery(min_price=min_price, max_price=max_price)).filters
        assert (filters.min_price, filters.max_price) == (expected_min, expected_max)

    def test_blank_search_is_inactive(self, planner: QueryEngine) -> None:
        assert planner.plan(CatalogQuery(search="")).filters.search_needle is None

    def test_empty_catalog(self, planner: QueryEngine) -> None:
        result = planner.execute(CatalogQuery(page=2, page_size=5))
        assert result.total == 0
        assert result.items == ()
        assert result.total_pages == 0


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TestFilters:
    def test_price_rating_scenario(self, engine: QueryEngine) -> None:
        query = dict(min_price=Decimal("10"), max_price=Decimal("30"), min_rating=4)

        for page_size in (1, 2, 3):
            result = engine.execute(CatalogQuery(page=1, page_size=page_size, **query))
            assert result.total == 2

        result = engine.execute(CatalogQuery(page=1, page_size=3, **query))
        assert _keys(result.items) == ["Sapiens", "Emma"]

    def test_bounds_are_inclusive(self, engine: QueryEngine) -> None:
        result = engine.execute(
            CatalogQuery(min_price=Decimal("10.00"), max_price=Decimal("30.00"), page_size=3)
        )
        assert _keys(result.items) == ["Sapiens", "Emma", "The Hobbit"]

    def test_in_stock_filter(self, engine: QueryEngine) -> None:
        assert engine.execute(CatalogQuery(in_stock=False)).total == 1
        assert engine.execute(CatalogQuery(in_stock=True)).total == 4

    @pytest.mark.parametrize(
        ("search", "expected"),
        [
            ("hobbit", ["The Hobbit"]),
            ("HOBBIT", ["The Hobbit"]),
            ("e", ["Sapiens", "Dune", "Emma"]),
            ("%", []),
            ("_", []),
            ("zzz", []),
        ],
    )
    def test_search(self, engine: QueryEngine, search: str, expected: list[str]) -> None:
        result = engine.execute(CatalogQuery(search=search, page_size=3))
        assert _keys(result.items) == expected

    def test_all_predicates_compose(self, engine: QueryEngine) -> None:
        result = engine.execute(
            CatalogQuery(
                min_price=Decimal("20"),
                min_rating=5,
                in_stock=True,
                search="ULY",
            )
        )
        assert _keys(result.items) == ["Ulysses"]

    def test_out_of_range_page(self, engine: QueryEngine) -> None:
        result = engine.execute(CatalogQuery(page=9, page_size=2))
        assert result.total == 5
        assert result.items == ()
        assert result.total_pages == 3

    def test_page_beyond_any_offset_is_empty(self, engine: QueryEngine) -> None:
        result = engine.execute(CatalogQuery(page=10**19, page_size=2))
        assert result.total == 5
        assert result.page == 10**19
        assert result.items == ()

    def test_lookup(self, engine: QueryEngine) -> None:
        dune = _fixture_records()[1]
        assert engine.lookup(dune.key) == dune
        assert engine.lookup("missing") is None


# ---------------------------------------------------------------------------
# Pagination completeness
# ---------------------------------------------------------------------------


class TestPaginationCompleteness:
    @pytest.mark.parametrize("page_size", [1, 2, 3])
    def test_pages_cover_filtered_set_once(self, engine: QueryEngine, page_size: int) -> None:
        first = engine.execute(CatalogQuery(page=1, page_size=page_size, in_stock=True))
        collected: list[CatalogRecord] = list(first.items)
        for page in range(2, first.total_pages + 1):
            collected.extend(
                engine.execute(CatalogQuery(page=page, page_size=page_size, in_stock=True)).items
            )

        expected = [record for record in _fixture_records() if record.in_stock]
        assert collected == expected
        assert len({record.key for record in collected}) == first.total


# ---------------------------------------------------------------------------
# Backend equivalence
# ---------------------------------------------------------------------------


def _fuzz_queries() -> list[CatalogQuery]:
    prices = [None, Decimal("0"), Decimal("9.99"), Decimal("10.005"), Decimal("30")]
    ratings = [None, 0, 4, 5]
    stock = [None, True, False]
    searches = [None, "s", "The", "a%"]
    queries = []
    for index, (low, rating, in_stock, search) in enumerate(
        itertools.product(prices, ratings, stock, searches)
    ):
        queries.append(
            CatalogQuery(
                page=1 + index % 3,
                page_size=1 + index % 4,
                min_price=low,
                max_price=prices[-1 - index % len(prices)],
                min_rating=rating,
                in_stock=in_stock,
                search=search,
            )
        )
    return queries


class TestBackendEquivalence:
    def test_same_results_for_fuzz_set(
        self,
        snapshot_store: SnapshotCatalogStore,
        persistent_store: SQLAlchemyCatalogStore,
    ) -> None:
        records = [
            make_record(
                f"book-{i:02d}",
                title=f"{'The ' if i % 3 == 0 else ''}Book {i} sAga",
                price=f"{(i * 7) % 40}.{i % 10}5",
                rating=i % 6,
                in_stock=i % 4 != 0,
            )
            for i in range(25)
        ]
        generation = make_generation(records)
        snapshot_store.publish(generation)
        persistent_store.publish(generation)

        snapshot_engine = QueryEngine(store=snapshot_store, max_page_size=10)
        persistent_engine = QueryEngine(store=persistent_store, max_page_size=10)

        for query in _fuzz_queries():
            assert snapshot_engine.execute(query) == persistent_engine.execute(query), query

    @pytest.mark.parametrize(
        ("min_price", "max_price", "expected_total"),
        [
            (Decimal("24.990000000000000001"), None, 0),
            (None, Decimal("24.989999999999999999"), 0),
            (Decimal("24.989999999999999999"), Decimal("24.990000000000000001"), 1),
        ],
    )
    def test_high_precision_price_bounds(
        self,
        snapshot_store: SnapshotCatalogStore,
        persistent_store: SQLAlchemyCatalogStore,
        min_price: Decimal | None,
        max_price: Decimal | None,
        expected_total: int,
    ) -> None:
        generation = make_generation([make_record("cheap", price="24.99")])
        snapshot_store.publish(generation)
        persistent_store.publish(generation)
        query = CatalogQuery(min_price=min_price, max_price=max_price)

        snapshot_result = QueryEngine(store=snapshot_store).execute(query)
        persistent_result = QueryEngine(store=persistent_store).execute(query)

        assert snapshot_result.total == expected_total
        assert snapshot_result == persistent_result
