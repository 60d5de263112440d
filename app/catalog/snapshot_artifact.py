"""
Durable JSON artifact for a sealed generation.

Lets a process serve the last crawled catalog before its first refresh.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from app.domain.catalog import CatalogRecord, Generation, GenerationBuilder
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class SnapshotArtifactError(Exception):
    """Raised when a snapshot artifact cannot be written or read."""


def write_snapshot(generation: Generation, path: str | Path) -> Path:
    """
    Write `generation` to `path` atomically (temp file then replace).
    """

    target = Path(path)
    payload = {
        "generation_id": generation.generation_id,
        "created_at": generation.created_at.isoformat(),
        "records": [record.model_dump(mode="json") for record in generation.records],
    }

    tmp_path = target.with_suffix(f"{target.suffix}.tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        tmp_path.replace(target)
    except OSError as exc:
        raise SnapshotArtifactError(f"Failed to write snapshot artifact {target}.") from exc
    finally:
        if tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return target


def load_snapshot(path: str | Path) -> Generation | None:
    """
    Load and re-validate a snapshot artifact; None when the file does not exist.

    Invalid records are skipped and logged; duplicates are dropped as at seal time.
    """

    source = Path(path)
    if not source.exists():
        return None

    try:
        raw = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SnapshotArtifactError(f"Unreadable snapshot artifact {source}.") from exc
    if not isinstance(raw, dict) or not isinstance(raw.get("records"), list):
        raise SnapshotArtifactError(f"Snapshot artifact {source} has no record list.")

    generation_id = raw.get("generation_id")
    builder = GenerationBuilder(generation_id=str(generation_id) if generation_id else None)
    builder.created_at = _parse_created_at(raw.get("created_at"), fallback=builder.created_at)

    invalid = 0
    for index, entry in enumerate(raw["records"]):
        try:
            builder.add(CatalogRecord.model_validate(entry))
        except ValidationError as exc:
            invalid += 1
            log_event(
                logger,
                logging.WARNING,
                "snapshot_record_invalid",
                path=str(source),
                index=index,
                error=str(exc.errors()[0].get("msg")),
            )

    generation = builder.seal()
    log_event(
        logger,
        logging.INFO,
        "snapshot_loaded",
        path=str(source),
        generation_id=generation.generation_id,
        record_count=generation.record_count,
        invalid_records=invalid,
        duplicates_dropped=len(builder.duplicates),
    )
    return generation


def _parse_created_at(value: object, *, fallback: datetime) -> datetime:
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return fallback
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed
    return fallback
