"""
tests/test_fetcher.py

Pytest tests for HttpPageFetcher retry behavior and DomainRateLimiter.

The requests session is replaced with a scripted stub; no network I/O.
"""

from __future__ import annotations

import pytest
import requests

from app.domain.errors import FetchError
from app.scraping import fetcher as fetcher_module
from app.scraping.config import CrawlSettings
from app.scraping.fetcher import HttpPageFetcher
from app.scraping.rate_limiter import DomainRateLimiter

URL = "https://books.example/catalogue/page-1.html"


def _settings(max_retries: int = 2) -> CrawlSettings:
    return CrawlSettings(
        entry_url=URL,
        user_agent="test-agent",
        timeout_seconds=3.0,
        max_retries=max_retries,
        backoff_initial_seconds=0.5,
        backoff_multiplier=2.0,
        page_delay_seconds=0.0,
        max_pages=10,
    )


def _response(status_code: int, text: str = "<html></html>") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    response.url = URL
    return response


class _ScriptedSession:
    def __init__(self, outcomes: list[requests.Response | Exception]) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, object]] = []

    def get(self, url: str, **kwargs: object) -> requests.Response:
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture()
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    recorded: list[float] = []
    monkeypatch.setattr(fetcher_module.time, "sleep", recorded.append)
    return recorded


class TestHttpPageFetcher:
    def test_success(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([_response(200, "<ol class='row'></ol>")])
        page = HttpPageFetcher(settings=_settings(), session=session).fetch(URL)

        assert page.status_code == 200
        assert page.content == "<ol class='row'></ol>"
        assert session.calls[0]["timeout"] == 3.0
        assert session.calls[0]["headers"] == {"User-Agent": "test-agent"}
        assert sleeps == []

    def test_retries_retryable_status_with_backoff(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([_response(503), _response(429), _response(200)])
        page = HttpPageFetcher(settings=_settings(), session=session).fetch(URL)

        assert page.status_code == 200
        assert sleeps == [0.5, 1.0]

    def test_timeout_exhausts_retries(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([requests.Timeout("slow")] * 3)

        with pytest.raises(FetchError) as exc_info:
            HttpPageFetcher(settings=_settings(), session=session).fetch(URL)

        assert exc_info.value.locator == URL
        assert len(session.calls) == 3

    def test_non_retryable_status_fails_fast(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([_response(404)])

        with pytest.raises(FetchError) as exc_info:
            HttpPageFetcher(settings=_settings(), session=session).fetch(URL)

        assert exc_info.value.status_code == 404
        assert sleeps == []

    def test_retryable_status_reported_after_retries(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([_response(500)])

        with pytest.raises(FetchError) as exc_info:
            HttpPageFetcher(settings=_settings(max_retries=0), session=session).fetch(URL)

        assert exc_info.value.status_code == 500

    def test_other_request_errors_wrapped(self, sleeps: list[float]) -> None:
        session = _ScriptedSession([requests.exceptions.InvalidURL("bad url")])
        with pytest.raises(FetchError):
            HttpPageFetcher(settings=_settings(), session=session).fetch(URL)


class TestDomainRateLimiter:
    def test_spacing_per_domain(self) -> None:
        now = [10.0]
        slept: list[float] = []
        limiter = DomainRateLimiter(
            min_interval_seconds=1.0,
            sleep=slept.append,
            clock=lambda: now[0],
        )

        assert limiter.wait(url="https://a.example/1") == 0.0
        now[0] = 10.25
        assert limiter.wait(url="https://a.example/2") == pytest.approx(0.75)
        assert limiter.wait(url="https://b.example/1") == 0.0
        assert slept == [pytest.approx(0.75)]

    def test_zero_interval_never_sleeps(self) -> None:
        slept: list[float] = []
        limiter = DomainRateLimiter(min_interval_seconds=0.0, sleep=slept.append)
        limiter.wait(url="https://a.example/1")
        limiter.wait(url="https://a.example/2")
        assert slept == []
