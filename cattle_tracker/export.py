"""
CSV export of stored records.

Header ``Fecha,Cabezas,Importe,INMAG``, then one line per record with the
stored values written as-is (no currency formatting).
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, TextIO

from cattle_tracker.domain.models import PriceRecord

CSV_HEADER = ("Fecha", "Cabezas", "Importe", "INMAG")


def write_csv(records: Iterable[PriceRecord], stream: TextIO) -> int:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    written = 0
    for record in records:
        writer.writerow([record.date, record.head_count, record.total_amount, record.index])
        written += 1
    return written


def to_csv(records: Iterable[PriceRecord]) -> str:
    buffer = io.StringIO()
    write_csv(records, buffer)
    return buffer.getvalue()


__all__ = ["CSV_HEADER", "write_csv", "to_csv"]
