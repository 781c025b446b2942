from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from cattle_tracker.domain.models import PriceRecord
from cattle_tracker.export import CSV_HEADER, to_csv, write_csv
from cattle_tracker.seed import load_seed, write_seed


def test_seed_round_trip_uses_source_field_names(tmp_path: Path, make_record) -> None:
    path = tmp_path / "data" / "historical.json"

    written = write_seed(path, [make_record("2025-12-01", index=2845.12, head_count=8032)])
    raw = json.loads(path.read_text(encoding="utf-8"))

    assert written == 1
    assert raw == [
        {"fecha": "2025-12-01", "cabezas": 8032, "importe": 1_000_000.0, "inmag": 2845.12}
    ]
    assert load_seed(path)[0].index == pytest.approx(2845.12)


def test_load_seed_rejects_malformed_entries(tmp_path: Path) -> None:
    path = tmp_path / "historical.json"
    path.write_text(json.dumps([{"fecha": "2025-12-01", "cabezas": "many"}]), encoding="utf-8")

    with pytest.raises(ValidationError):
        load_seed(path)


def test_load_seed_requires_array(tmp_path: Path) -> None:
    path = tmp_path / "historical.json"
    path.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError, match="JSON array"):
        load_seed(path)


def test_csv_export_header_and_field_order() -> None:
    record = PriceRecord(fecha="2026-01-20", cabezas=8032, importe=15234567.5, inmag=2845.12)
    stream = io.StringIO()

    assert write_csv([record], stream) == 1
    assert stream.getvalue() == "Fecha,Cabezas,Importe,INMAG\n2026-01-20,8032,15234567.5,2845.12\n"
    assert to_csv([]) == ",".join(CSV_HEADER) + "\n"
