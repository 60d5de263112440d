"""
tests/conftest.py

Shared fixtures: record factories, listing-page HTML, an in-memory fake
fetcher, and both catalog store backends.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from decimal import Decimal
from html import escape

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from app.catalog.store import SnapshotCatalogStore, SQLAlchemyCatalogStore
from app.domain.catalog import CatalogRecord, Generation, GenerationBuilder, derive_record_key
from app.domain.errors import FetchError
from app.scraping.types import FetchedPage
from db.session import build_session_factory

BASE_URL = "https://books.example/catalogue/"


def book_locator(slug: str) -> str:
    return f"{BASE_URL}{slug}/index.html"


def page_locator(number: int) -> str:
    return f"{BASE_URL}page-{number}.html"


class FakeFetcher:
    """
    In-memory fetcher keyed by URL.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self, pages: dict[str, str | Exception]) -> None:
        self.pages = pages
        self.calls: list[str] = []

    def fetch(self, locator: str) -> FetchedPage:
        self.calls.append(locator)
        content = self.pages.get(locator)
        if content is None:
            raise FetchError(f"Failed to fetch {locator}: status=404", locator=locator, status_code=404)
        if isinstance(content, Exception):
            raise content
        return FetchedPage(locator=locator, content=content, status_code=200)


def render_listing(entries: list[dict[str, str]], next_href: str | None = None) -> str:
    """
    Render a catalog listing page shaped like the live books catalog.
    """

    items = []
    for entry in entries:
        title = escape(entry.get("title", ""), quote=True)
        href = escape(entry.get("href", ""), quote=True)
        thumb = escape(entry.get("thumb", "../media/cache/thumb.jpg"), quote=True)
        anchor = f'<a href="{href}" title="{title}">{title[:20]}</a>' if href else f"<span>{title}</span>"
        items.append(
            '<li class="col-xs-6 col-sm-4">'
            '<article class="product_pod">'
            f'<div class="image_container"><a href="{href}"><img src="{thumb}" alt="{title}" class="thumbnail"></a></div>'
            f'<p class="star-rating {entry.get("rating", "Three")}"><i class="icon-star"></i></p>'
            f"<h3>{anchor}</h3>"
            '<div class="product_price">'
            f'<p class="price_color">{entry.get("price", "£10.00")}</p>'
            '<p class="instock availability">\n    <i class="icon-ok"></i>\n    '
            f'{entry.get("availability", "In stock")}\n</p>'
            "</div>"
            "</article>"
            "</li>"
        )

    pager = ""
    if next_href is not None:
        pager = f'<ul class="pager"><li class="next"><a href="{next_href}">next</a></li></ul>'

    return (
        "<!DOCTYPE html><html><head><title>All products</title></head><body>"
        '<section><div><ol class="row">'
        + "".join(items)
        + "</ol>"
        + pager
        + "</div></section></body></html>"
    )


def make_record(
    slug: str,
    *,
    title: str | None = None,
    price: str = "10.00",
    rating: int = 3,
    in_stock: bool = True,
) -> CatalogRecord:
    detail = book_locator(slug)
    return CatalogRecord(
        key=derive_record_key(detail),
        title=title or slug.replace("-", " ").title(),
        price=Decimal(price),
        in_stock=in_stock,
        rating=rating,
        detail_locator=detail,
        thumbnail_locator=f"https://books.example/media/{slug}.jpg",
        availability_text="In stock" if in_stock else "Out of stock",
    )


def make_generation(records: list[CatalogRecord]) -> Generation:
    builder = GenerationBuilder()
    builder.extend(records)
    return builder.seal()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fetcher_factory() -> Callable[[dict[str, str | Exception]], FakeFetcher]:
    return FakeFetcher


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture()
def snapshot_store() -> SnapshotCatalogStore:
    return SnapshotCatalogStore()


@pytest.fixture()
def persistent_store(sqlite_engine: Engine) -> SQLAlchemyCatalogStore:
    store = SQLAlchemyCatalogStore(
        session_factory=build_session_factory(sqlite_engine),
        batch_size=3,
        retain_generations=2,
    )
    store.create_schema(sqlite_engine)
    return store


@pytest.fixture(params=["snapshot", "persistent"])
def any_store(request: pytest.FixtureRequest):
    """Each test using this fixture runs once per backend."""
    return request.getfixturevalue(f"{request.param}_store")
