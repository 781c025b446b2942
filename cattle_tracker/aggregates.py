"""
In-memory aggregation over price records.

Every statistic ignores records whose index is zero or negative (market
closed), even when the caller already filtered them in SQL, so stale bad rows
cannot leak into averages before the cleanup pass removes them.
"""

from __future__ import annotations

import calendar
import statistics
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from cattle_tracker.domain.models import PriceRecord


def qualifying(records: Iterable[PriceRecord]) -> List[PriceRecord]:
    """Records that carry an actual price (index > 0)."""
    return [record for record in records if record.index is not None and record.index > 0]


def population_stddev(values: Sequence[float]) -> Optional[float]:
    """sqrt(mean((x - mean(x))^2)); 0.0 for a single value, None for none."""
    if not values:
        return None
    return statistics.pstdev(values)


def percent_change(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    """((current - previous) / previous) * 100, or None when either side is missing."""
    if current is None or previous is None or previous == 0:
        return None
    return (current - previous) / previous * 100


def _mean(values: Sequence[float]) -> Optional[float]:
    return statistics.fmean(values) if values else None


def summarize(records: Iterable[PriceRecord]) -> Dict[str, Any]:
    """
    Compute the shared aggregate shape (see `PeriodStats`) for a set of records.
    """
    rows = qualifying(records)
    if not rows:
        return {"days": 0, "total_head_count": 0, "total_amount": 0.0}

    indexes = [row.index for row in rows]
    head_counts = [row.head_count for row in rows]
    amounts = [row.total_amount for row in rows]
    dates = [row.date for row in rows]

    avg_index = _mean(indexes)
    volatility = population_stddev(indexes)
    return {
        "days": len(rows),
        "first_date": min(dates),
        "last_date": max(dates),
        "avg_index": avg_index,
        "min_index": min(indexes),
        "max_index": max(indexes),
        "avg_head_count": _mean(head_counts),
        "total_head_count": sum(head_counts),
        "avg_amount": _mean(amounts),
        "total_amount": sum(amounts),
        "volatility": volatility,
        "volatility_percent": volatility / avg_index * 100 if avg_index else None,
    }


def average_index(records: Iterable[PriceRecord]) -> Optional[float]:
    return _mean([row.index for row in qualifying(records)])


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month, leap years included."""
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move `delta` calendar months from (year, month); negative goes back."""
    absolute = year * 12 + (month - 1) + delta
    return absolute // 12, absolute % 12 + 1


def previous_month(reference: date) -> Tuple[int, int]:
    return shift_month(reference.year, reference.month, -1)


def month_prefix(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


__all__ = [
    "qualifying",
    "population_stddev",
    "percent_change",
    "summarize",
    "average_index",
    "month_bounds",
    "shift_month",
    "previous_month",
    "month_prefix",
]
