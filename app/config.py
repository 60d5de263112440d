"""
app/config.py

Environment settings for the catalog store, query engine and refresh trigger.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

BACKEND_SNAPSHOT = "snapshot"
BACKEND_PERSISTENT = "persistent"
_ALLOWED_BACKENDS = {BACKEND_SNAPSHOT, BACKEND_PERSISTENT}
_TRUE_VALUES = {"1", "true", "yes", "on"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def read_env(name: str) -> str | None:
    """
    Stripped value of `name`, or None when unset or blank.

    Project `.env` files are loaded on first use.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def env_str(name: str, default: str) -> str:
    return read_env(name) or default


def env_bool(name: str, default: bool) -> bool:
    value = read_env(name)
    if value is None:
        return default
    return value.lower() in _TRUE_VALUES


def env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    value = read_env(name)
    try:
        parsed = int(value) if value is not None else default
    except ValueError:
        parsed = default
    return parsed if minimum is None else max(minimum, parsed)


def env_float(name: str, default: float, *, minimum: float | None = None) -> float:
    value = read_env(name)
    try:
        parsed = float(value) if value is not None else default
    except ValueError:
        parsed = default
    return parsed if minimum is None else max(minimum, parsed)


def _require_backend() -> str:
    """
    Read and validate CATALOG_BACKEND.

    The backend is chosen once at startup; an unknown value is a startup error.
    """

    raw = env_str("CATALOG_BACKEND", BACKEND_SNAPSHOT)
    backend = raw.lower()
    if backend not in _ALLOWED_BACKENDS:
        raise RuntimeError(
            f"CATALOG_BACKEND '{raw}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_BACKENDS)}."
        )
    return backend


@dataclass(frozen=True)
class CatalogSettings:
    """
    Runtime settings for the catalog store, query engine and refresh trigger.
    """

    backend: str = BACKEND_SNAPSHOT
    snapshot_path: str = "data/catalog_snapshot.json"
    default_page_size: int = 20
    max_page_size: int = 200
    refresh_token: str | None = None
    storage_batch_size: int = 1000
    retain_generations: int = 2
    refresh_on_startup: bool = False


@lru_cache(maxsize=1)
def get_catalog_settings() -> CatalogSettings:
    """
    Return cached catalog settings from environment variables.

    Raises RuntimeError if CATALOG_BACKEND is not a known backend.
    """

    max_page_size = env_int("CATALOG_MAX_PAGE_SIZE", 200, minimum=1)
    return CatalogSettings(
        backend=_require_backend(),
        snapshot_path=env_str("CATALOG_SNAPSHOT_PATH", "data/catalog_snapshot.json"),
        default_page_size=min(
            max_page_size,
            env_int("CATALOG_DEFAULT_PAGE_SIZE", 20, minimum=1),
        ),
        max_page_size=max_page_size,
        refresh_token=read_env("CATALOG_REFRESH_TOKEN"),
        storage_batch_size=env_int("CATALOG_STORAGE_BATCH_SIZE", 1000, minimum=1),
        retain_generations=env_int("CATALOG_RETAIN_GENERATIONS", 2, minimum=2),
        refresh_on_startup=env_bool("CATALOG_REFRESH_ON_STARTUP", False),
    )
