"""
Bundled seed data: a JSON array of ``{fecha, cabezas, importe, inmag}`` objects.

The seed file backfills an empty store at startup and is produced by
``scripts/download_data.py``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List

from cattle_tracker.domain.models import PriceRecord


def load_seed(path: Path | str) -> List[PriceRecord]:
    """Read and validate every entry of a seed file."""
    with Path(path).open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, list):
        raise ValueError(f"Seed file {path} must contain a JSON array")
    return [PriceRecord.model_validate(item) for item in payload]


def write_seed(path: Path | str, records: Iterable[PriceRecord]) -> int:
    """Write records in seed shape; returns how many were written."""
    rows = [record.to_row() for record in records]
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2)
    return len(rows)


__all__ = ["load_seed", "write_seed"]
