"""
Domain models for the cattle price tracker.

`PriceRecord` mirrors a row of the `price_records` table; field aliases are
the column names used by the store, the seed file and the CSV export. The
statistics models are the payloads produced by the store's aggregate queries.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

MONTH_NAMES = (
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
)


def month_name(month: int) -> str:
    """Spanish month name for 1-12, empty string otherwise."""
    return MONTH_NAMES[month - 1] if 1 <= month <= 12 else ""


class PriceRecord(BaseModel):
    """
    One trading day of the market.
    """

    date: str = Field(..., alias="fecha", description="Canonical YYYY-MM-DD day; unique key.")
    head_count: int = Field(..., alias="cabezas", description="Units traded that day.")
    total_amount: float = Field(0.0, alias="importe", description="Monetary total for the day.")
    index: float = Field(
        ..., alias="inmag", description="INMAG price index; 0 means market closed."
    )
    inserted_at: Optional[str] = Field(
        None, alias="created_at", description="Store-assigned creation timestamp."
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def to_row(self) -> Dict[str, Any]:
        """Column/value mapping used for SQL parameters and the seed file."""
        return {
            "fecha": self.date,
            "cabezas": self.head_count,
            "importe": self.total_amount,
            "inmag": self.index,
        }


class PeriodStats(BaseModel):
    """
    Aggregates over the qualifying (index > 0) records of a period.

    Averages and extremes are None when the period has no qualifying rows.
    """

    days: int = 0
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    avg_index: Optional[float] = None
    min_index: Optional[float] = None
    max_index: Optional[float] = None
    avg_head_count: Optional[float] = None
    total_head_count: int = 0
    avg_amount: Optional[float] = None
    total_amount: float = 0.0
    volatility: Optional[float] = Field(None, description="Population stddev of the index.")
    volatility_percent: Optional[float] = Field(
        None, description="Volatility as a percentage of the average index."
    )


class MonthlyStats(PeriodStats):
    year: int
    month: int
    month_name: str = ""


class RangeStats(PeriodStats):
    start: Optional[str] = None
    end: Optional[str] = None


class YearSummary(PeriodStats):
    year: int


class YearlyStats(YearSummary):
    months: List[MonthlyStats] = Field(default_factory=list)


class AllTimeStats(PeriodStats):
    years: List[YearSummary] = Field(default_factory=list)


class TrendComparison(BaseModel):
    """Average index of a period compared with the period right before it."""

    current_start: str
    current_end: str
    previous_start: str
    previous_end: str
    current: Optional[float] = None
    previous: Optional[float] = None
    change_percent: Optional[float] = None


class Trends(BaseModel):
    reference_date: str
    weekly: TrendComparison
    monthly: TrendComparison


class CleanupResult(BaseModel):
    invalid_dates: int = 0
    zero_index: int = 0

    @property
    def total(self) -> int:
        return self.invalid_dates + self.zero_index


__all__ = [
    "MONTH_NAMES",
    "month_name",
    "PriceRecord",
    "PeriodStats",
    "MonthlyStats",
    "RangeStats",
    "YearSummary",
    "YearlyStats",
    "AllTimeStats",
    "TrendComparison",
    "Trends",
    "CleanupResult",
]
