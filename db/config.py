"""
Environment-driven database configuration for the persistent catalog backend.
"""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILENAMES = (".env", ".env.local")
CLOUD_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})
_SUPPORTED_URL_PREFIXES = ("postgresql", "sqlite")
_URL_REWRITES = (
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path | None = None) -> list[str]:
    """
    Load KEY=VALUE pairs from `.env` then `.env.local` under `root`.

    Variables already present in the process environment win. Returns the
    keys that were set.
    """

    loaded: list[str] = []
    base = root or PROJECT_ROOT
    for filename in ENV_FILENAMES:
        env_path = base / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is None:
                continue
            key, value = parsed
            if key not in os.environ:
                os.environ[key] = value
                loaded.append(key)
    return loaded


def normalize_database_url(url: str) -> str:
    """
    Rewrite bare postgres schemes to the psycopg driver; other URLs pass through.
    """

    stripped = url.strip()
    for prefix, replacement in _URL_REWRITES:
        if stripped.startswith(prefix):
            return replacement + stripped[len(prefix) :]
    return stripped


def is_supported_database_url(url: str) -> bool:
    return url.startswith(_SUPPORTED_URL_PREFIXES)


def resolve_database_url() -> str:
    """
    Pick the catalog database URL.

    Order: DATABASE_URL, CLOUD_DATABASE_URL (only when ENVIRONMENT is
    cloud-like), LOCAL_DATABASE_URL.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = ["DATABASE_URL"]
    if environment in CLOUD_ENVIRONMENTS:
        candidates.append("CLOUD_DATABASE_URL")
    candidates.append("LOCAL_DATABASE_URL")

    for name in candidates:
        value = (os.getenv(name) or "").strip()
        if value:
            return normalize_database_url(value)

    raise RuntimeError(
        "No database URL configured for the persistent catalog backend. "
        f"Set one of: {', '.join(candidates)}."
    )
