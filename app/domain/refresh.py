"""
app/domain/refresh.py

Domain models for refresh orchestration.
"""

from __future__ import annotations

from dataclasses import dataclass


class RefreshStatus:
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RefreshOutcome:
    """
    Structured result of one refresh run.

    On failure or cancellation `generation_id` is None and the previously
    published generation is still the visible one.
    """

    status: str
    generation_id: str | None
    records_published: int
    pages_fetched: int
    normalization_failures: int
    duplicates_dropped: int
    last_locator: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == RefreshStatus.SUCCESS
