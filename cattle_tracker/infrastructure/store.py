"""
Time-series store for daily price records.

`PriceStore` owns one SQLite connection with an explicit open/close lifecycle.
Writes go through an idempotent upsert keyed by `fecha` (the latest write wins
and replaces cabezas/importe/inmag as a whole); a batch is applied inside a
single transaction, so a failing record leaves none of the batch behind.

Raw reads (`latest`, `history`, `all_records`, an unbounded `date_range`)
return stored rows as they are, market-closed rows included. Every aggregate
only looks at rows with inmag > 0.

Methods that depend on "today" take an optional reference date so results are
deterministic under test.
"""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from itertools import groupby
from pathlib import Path
from typing import Iterable, List, Optional

from cattle_tracker.aggregates import (
    average_index,
    month_bounds,
    month_prefix,
    percent_change,
    previous_month,
    shift_month,
    summarize,
)
from cattle_tracker.domain.models import (
    AllTimeStats,
    CleanupResult,
    MonthlyStats,
    PriceRecord,
    RangeStats,
    TrendComparison,
    Trends,
    YearlyStats,
    YearSummary,
    month_name,
)
from cattle_tracker.infrastructure.db_factory import connect, init_schema
from cattle_tracker.utils.logging import get_logger

log = get_logger(__name__)

_COLUMNS = (
    "fecha, COALESCE(cabezas, 0) AS cabezas, COALESCE(importe, 0) AS importe, "
    "inmag, created_at"
)

_UPSERT_SQL = """
INSERT INTO price_records (fecha, cabezas, importe, inmag)
VALUES (:fecha, :cabezas, :importe, :inmag)
ON CONFLICT(fecha) DO UPDATE SET
    cabezas = excluded.cabezas,
    importe = excluded.importe,
    inmag = excluded.inmag
"""

_CANONICAL_DATE_GLOB = "[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]"

TREND_WINDOW_DAYS = 7


class StoreClosedError(RuntimeError):
    """Raised when the store is used before `open()` or after `close()`."""


def _to_record(row: sqlite3.Row) -> PriceRecord:
    # Stored rows may predate validation (null inmag, odd dates); build them as-is.
    return PriceRecord.model_construct(
        date=row["fecha"],
        head_count=row["cabezas"],
        total_amount=row["importe"],
        index=row["inmag"],
        inserted_at=row["created_at"],
    )


class PriceStore:
    """
    SQLite-backed store of `PriceRecord`s.

    Example
    -------
        with PriceStore("data/prices.db") as store:
            store.upsert_many(records)
            print(store.range_stats("2026-01-01", "2026-01-31"))
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = str(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> "PriceStore":
        if self._conn is None:
            conn = connect(self.db_path)
            try:
                init_schema(conn)
            except sqlite3.Error:
                conn.close()
                log.exception("Schema setup failed", extra={"db_path": self.db_path})
                raise
            self._conn = conn
            log.info("Store opened", extra={"db_path": self.db_path})
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            log.info("Store closed", extra={"db_path": self.db_path})

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosedError(f"Store at {self.db_path} is not open")
        return self._conn

    def __enter__(self) -> "PriceStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def upsert(self, record: PriceRecord) -> int:
        return self.upsert_many([record])

    def upsert_many(self, records: Iterable[PriceRecord]) -> int:
        """
        Insert or replace a batch of records in one transaction.

        Returns the number of records written. Any `sqlite3.Error` rolls the
        whole batch back and is re-raised.
        """
        rows = [record.to_row() for record in records]
        if not rows:
            return 0
        conn = self.connection
        try:
            with conn:
                conn.executemany(_UPSERT_SQL, rows)
        except sqlite3.Error:
            log.exception("Batch upsert rolled back", extra={"records": len(rows)})
            raise
        log.info(f"Upserted {len(rows)} records", extra={"records": len(rows)})
        return len(rows)

    def clean_bad_data(self) -> CleanupResult:
        """
        Delete rows with a non-canonical date or a zero/null index.

        Running it again right away removes nothing.
        """
        conn = self.connection
        with conn:
            invalid_dates = conn.execute(
                "DELETE FROM price_records WHERE fecha IS NULL OR length(fecha) != 10 "
                "OR fecha NOT GLOB ?",
                (_CANONICAL_DATE_GLOB,),
            ).rowcount
            zero_index = conn.execute(
                "DELETE FROM price_records WHERE inmag IS NULL OR inmag = 0"
            ).rowcount
        result = CleanupResult(invalid_dates=invalid_dates, zero_index=zero_index)
        if result.total:
            log.info(
                f"Removed {result.total} bad rows",
                extra={"invalid_dates": invalid_dates, "zero_index": zero_index},
            )
        return result

    # ------------------------------------------------------------------
    # Raw reads
    # ------------------------------------------------------------------
    def _select(
        self, where: str = "", params: tuple = (), limit: Optional[int] = None
    ) -> List[PriceRecord]:
        sql = f"SELECT {_COLUMNS} FROM price_records"
        if where:
            sql += f" WHERE {where}"
        sql += " ORDER BY fecha DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params = (*params, limit)
        return [_to_record(row) for row in self.connection.execute(sql, params)]

    def count(self) -> int:
        return self.connection.execute("SELECT COUNT(*) FROM price_records").fetchone()[0]

    def latest(self, limit: int = 10) -> List[PriceRecord]:
        """The `limit` most recent records, newest first."""
        return self._select(limit=limit)

    def history(self, days: int = 30) -> List[PriceRecord]:
        """The most recent `days` records, newest first."""
        return self._select(limit=days)

    def all_records(self) -> List[PriceRecord]:
        return self._select()

    def date_range(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> List[PriceRecord]:
        """
        Priced records with `start <= fecha <= end`, newest first.

        Without both bounds every stored row is returned, unfiltered.
        """
        if start is None or end is None:
            return self.all_records()
        return self._select("fecha BETWEEN ? AND ? AND inmag > 0", (start, end))

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------
    def _priced(self, where: str = "", params: tuple = ()) -> List[PriceRecord]:
        clause = f"inmag > 0 AND ({where})" if where else "inmag > 0"
        return self._select(clause, params)

    def _priced_between(self, start: str, end: str) -> List[PriceRecord]:
        return self._priced("fecha BETWEEN ? AND ?", (start, end))

    def _priced_with_prefix(self, prefix: str) -> List[PriceRecord]:
        return self._priced("fecha LIKE ?", (f"{prefix}%",))

    def monthly_average(self, year: int, month: int) -> MonthlyStats:
        rows = self._priced_with_prefix(month_prefix(year, month))
        return MonthlyStats(year=year, month=month, month_name=month_name(month), **summarize(rows))

    def last_month_stats(self, today: Optional[date] = None) -> MonthlyStats:
        year, month = previous_month(today or date.today())
        return self.monthly_average(year, month)

    def range_stats(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> RangeStats:
        if start is None or end is None:
            rows = self._priced()
        else:
            rows = self._priced_between(start, end)
        return RangeStats(start=start, end=end, **summarize(rows))

    def _compare(
        self, current: tuple[date, date], previous: tuple[date, date]
    ) -> TrendComparison:
        current_avg = average_index(self._priced_between(*(d.isoformat() for d in current)))
        previous_avg = average_index(self._priced_between(*(d.isoformat() for d in previous)))
        return TrendComparison(
            current_start=current[0].isoformat(),
            current_end=current[1].isoformat(),
            previous_start=previous[0].isoformat(),
            previous_end=previous[1].isoformat(),
            current=current_avg,
            previous=previous_avg,
            change_percent=percent_change(current_avg, previous_avg),
        )

    def trends(self, today: Optional[date] = None) -> Trends:
        """
        Trailing 7 days vs the 7 days before, and this month vs last month.
        """
        today = today or date.today()
        week_start = today - timedelta(days=TREND_WINDOW_DAYS - 1)
        prior_end = week_start - timedelta(days=1)
        prior_start = prior_end - timedelta(days=TREND_WINDOW_DAYS - 1)

        last_year, last_month = previous_month(today)
        return Trends(
            reference_date=today.isoformat(),
            weekly=self._compare((week_start, today), (prior_start, prior_end)),
            monthly=self._compare(
                month_bounds(today.year, today.month), month_bounds(last_year, last_month)
            ),
        )

    def monthly_comparison(
        self, months: int = 6, today: Optional[date] = None
    ) -> List[MonthlyStats]:
        """
        Monthly stats for the last `months` calendar months (current included),
        oldest first. Months without data are left out.
        """
        today = today or date.today()
        collected: List[MonthlyStats] = []
        for offset in range(months):
            year, month = shift_month(today.year, today.month, -offset)
            stats = self.monthly_average(year, month)
            if stats.days:
                collected.append(stats)
        collected.reverse()
        return collected

    def yearly_stats(
        self, year: Optional[int] = None, today: Optional[date] = None
    ) -> YearlyStats:
        year = year or (today or date.today()).year
        # Grouping keys are sliced out of the date, so only canonical dates qualify.
        rows = self._priced(
            "fecha LIKE ? AND fecha GLOB ?", (f"{year:04d}%", _CANONICAL_DATE_GLOB)
        )
        months = [
            MonthlyStats(
                year=year,
                month=int(key[5:7]),
                month_name=month_name(int(key[5:7])),
                **summarize(group),
            )
            for key, group in groupby(sorted(rows, key=lambda r: r.date), key=lambda r: r.date[:7])
        ]
        return YearlyStats(year=year, months=months, **summarize(rows))

    def all_time_stats(self) -> AllTimeStats:
        rows = self._priced("fecha GLOB ?", (_CANONICAL_DATE_GLOB,))
        years = [
            YearSummary(year=int(key), **summarize(group))
            for key, group in groupby(sorted(rows, key=lambda r: r.date), key=lambda r: r.date[:4])
        ]
        return AllTimeStats(years=years, **summarize(rows))


__all__ = ["PriceStore", "StoreClosedError", "TREND_WINDOW_DAYS"]
