"""
HTTP fetch collaborator used by the crawler.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

import requests

from app.domain.errors import FetchError
from app.scraping.config.models import CrawlSettings
from app.scraping.logging_utils import log_event
from app.scraping.types import FetchedPage

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class PageFetcher(Protocol):
    def fetch(self, locator: str) -> FetchedPage:
        """
        Return the page content or raise FetchError.
        """
        ...


class HttpPageFetcher:
    """
    requests-based fetcher with a per-request timeout and bounded retries.

    Timeouts, transport errors and non-success statuses all surface as
    FetchError once retries are exhausted.
    """

    def __init__(
        self,
        *,
        settings: CrawlSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._headers = {"User-Agent": settings.user_agent}

    def fetch(self, locator: str) -> FetchedPage:
        last_error: Exception | None = None
        last_status: int | None = None

        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.get(
                    locator,
                    headers=self._headers,
                    timeout=self._settings.timeout_seconds,
                    allow_redirects=True,
                )
                last_status = response.status_code
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return FetchedPage(
                    locator=locator,
                    content=response.text,
                    status_code=response.status_code,
                )
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as exc:
                last_error = exc
                if isinstance(exc, requests.HTTPError):
                    status_code = exc.response.status_code if exc.response is not None else None
                    if status_code not in RETRYABLE_STATUS_CODES:
                        raise FetchError(
                            f"Failed to fetch {locator}: status={status_code}",
                            locator=locator,
                            status_code=status_code,
                        ) from exc
            except requests.RequestException as exc:
                raise FetchError(f"Failed to fetch {locator}: {exc}", locator=locator) from exc

            if attempt >= self._settings.max_retries:
                break

            backoff_seconds = self._settings.backoff_initial_seconds * (
                self._settings.backoff_multiplier**attempt
            )
            log_event(
                logger,
                logging.WARNING,
                "page_fetch_retry",
                locator=locator,
                attempt=attempt + 1,
                backoff_seconds=backoff_seconds,
                error=str(last_error),
            )
            time.sleep(backoff_seconds)

        raise FetchError(
            f"Failed to fetch {locator} after retries: {last_error}",
            locator=locator,
            status_code=last_status,
        )
