"""
Domain-aware inter-page throttle.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a fixed minimum interval between requests to the same domain.
    """

    def __init__(
        self,
        *,
        min_interval_seconds: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._min_interval_seconds = max(0.0, min_interval_seconds)
        self._sleep = sleep
        self._clock = clock
        self._last_request_by_domain: dict[str, float] = {}
        self._lock = threading.Lock()

    def wait(self, *, url: str) -> float:
        """
        Sleep as needed so requests to `url`'s domain stay spaced out.

        Returns the number of seconds slept.
        """

        parsed = urlparse(url)
        domain = parsed.netloc.lower() or parsed.path.lower()
        if not domain or self._min_interval_seconds <= 0:
            return 0.0

        with self._lock:
            slept = 0.0
            last_time = self._last_request_by_domain.get(domain)
            if last_time is not None:
                wait_seconds = self._min_interval_seconds - (self._clock() - last_time)
                if wait_seconds > 0:
                    self._sleep(wait_seconds)
                    slept = wait_seconds
            self._last_request_by_domain[domain] = self._clock()
            return slept
