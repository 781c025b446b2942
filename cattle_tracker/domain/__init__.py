"""
Domain package for the cattle price tracker.

Exports the price record and the statistics payloads shared by the scraper,
the store and the service layer.
"""

from cattle_tracker.domain.models import (
    AllTimeStats,
    CleanupResult,
    MonthlyStats,
    PeriodStats,
    PriceRecord,
    RangeStats,
    TrendComparison,
    Trends,
    YearlyStats,
    YearSummary,
    month_name,
)

__all__ = [
    "AllTimeStats",
    "CleanupResult",
    "MonthlyStats",
    "PeriodStats",
    "PriceRecord",
    "RangeStats",
    "TrendComparison",
    "Trends",
    "YearlyStats",
    "YearSummary",
    "month_name",
]
