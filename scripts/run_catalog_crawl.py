"""
Run one catalog crawl from CLI and write the snapshot artifact.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import replace

from app.catalog.store import SnapshotCatalogStore
from app.config import get_catalog_settings
from app.scraping.config import get_crawl_settings
from app.scraping.logging_utils import configure_logging
from app.services.catalog_service import build_crawler_factory
from app.services.refresh_orchestrator import RefreshOrchestrator


def main() -> int:
    parser = argparse.ArgumentParser(description="Crawl the catalog and write a snapshot artifact.")
    parser.add_argument(
        "--entry-url",
        dest="entry_url",
        default=None,
        help="Override CATALOG_ENTRY_URL.",
    )
    parser.add_argument(
        "--max-pages",
        dest="max_pages",
        type=int,
        default=None,
        help="Override CATALOG_MAX_PAGES.",
    )
    parser.add_argument(
        "--out",
        dest="out",
        default=None,
        help="Snapshot artifact path (defaults to CATALOG_SNAPSHOT_PATH).",
    )
    args = parser.parse_args()

    configure_logging()
    crawl_settings = get_crawl_settings()
    if args.entry_url:
        crawl_settings = replace(crawl_settings, entry_url=args.entry_url)
    if args.max_pages is not None:
        crawl_settings = replace(crawl_settings, max_pages=max(1, args.max_pages))

    out_path = args.out or get_catalog_settings().snapshot_path
    orchestrator = RefreshOrchestrator(
        crawler_factory=build_crawler_factory(crawl_settings),
        store=SnapshotCatalogStore(),
        snapshot_path=out_path,
    )
    outcome = orchestrator.refresh()

    payload = {
        "status": outcome.status,
        "generation_id": outcome.generation_id,
        "records_published": outcome.records_published,
        "pages_fetched": outcome.pages_fetched,
        "normalization_failures": outcome.normalization_failures,
        "duplicates_dropped": outcome.duplicates_dropped,
        "last_locator": outcome.last_locator,
        "error": outcome.error,
        "snapshot_path": out_path if outcome.ok else None,
    }
    print(json.dumps(payload, indent=2))
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
