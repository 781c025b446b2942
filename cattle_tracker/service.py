"""
Service layer: composes the scraper and the store into the operations the
presentation layer (HTTP API, CLI) calls.

Usage (example):
    from cattle_tracker.infrastructure import PriceStore
    from cattle_tracker.service import MarketService

    with PriceStore("data/prices.db") as store:
        service = MarketService(store)
        asyncio.run(service.startup())
        print(service.trends())

Every public operation returns an `OperationResult`; failures are logged and
reported through `success=False` and a message, never raised.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, TypedDict

from pydantic import BaseModel

from cattle_tracker.aggregates import shift_month
from cattle_tracker.config import Settings, get_settings
from cattle_tracker.export import to_csv
from cattle_tracker.infrastructure.store import PriceStore
from cattle_tracker.scraper import MarketScraper
from cattle_tracker.seed import load_seed
from cattle_tracker.utils.logging import get_logger
from cattle_tracker.utils.profiler import profile_block

log = get_logger(__name__)


class OperationResult(TypedDict, total=False):
    """
    Outcome contract handed to the presentation layer.

    `data` holds JSON-ready values (dicts/lists), `count` the number of
    records involved when that is meaningful.
    """

    success: bool
    message: str
    data: Any
    count: int
    step: str


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


def _ok(message: str, data: Any = None, **fields: Any) -> OperationResult:
    result = OperationResult(success=True, message=message, **fields)
    if data is not None:
        result["data"] = _dump(data)
    return result


def _failed(message: str, **fields: Any) -> OperationResult:
    return OperationResult(success=False, message=message, **fields)


class MarketService:
    """
    Orchestrates ingestion (startup, backfill, refresh) and statistics reads.

    Parameters
    ----------
    store : PriceStore
        An opened store; the caller owns its lifecycle.
    scraper : MarketScraper | None
        Defaults to a scraper built from `settings`.
    settings : Settings | None
        Defaults to `get_settings()`.
    """

    def __init__(
        self,
        store: PriceStore,
        scraper: Optional[MarketScraper] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.scraper = scraper or MarketScraper(self.settings)

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------
    async def _scrape_and_store(self) -> int:
        records = await self.scraper.scrape()
        if not records:
            return 0
        return self.store.upsert_many(records)

    async def refresh(self) -> OperationResult:
        """Scrape the current listing and upsert whatever it returns."""
        try:
            stored = await self._scrape_and_store()
        except Exception as exc:  # noqa: BLE001 - reported to the caller
            log.exception("Refresh failed")
            return _failed(f"Refresh failed: {exc}")
        return _ok(f"Refreshed {stored} records", count=stored)

    def load_seed(self, path: Optional[Path | str] = None) -> int:
        """Upsert the bundled seed file as one batch; returns records written."""
        seed_path = Path(path or self.settings.seed_path)
        records = load_seed(seed_path)
        log.info(f"Loading {len(records)} seed records", extra={"seed_path": str(seed_path)})
        return self.store.upsert_many(records)

    async def backfill(self, today: Optional[date] = None) -> int:
        """
        Populate the store with history.

        Uses the seed file when it exists, otherwise re-scrapes the last
        `backfill_months` calendar months (current month included).
        """
        seed_path = Path(self.settings.seed_path)
        if seed_path.exists():
            return self.load_seed(seed_path)

        today = today or date.today()
        months = [
            shift_month(today.year, today.month, -offset)
            for offset in reversed(range(self.settings.backfill_months))
        ]
        log.info("No seed file, re-scraping months", extra={"months": months})
        records = await self.scraper.scrape_months(months)
        return self.store.upsert_many(records) if records else 0

    async def _run_step(
        self, name: str, step: Callable[[], Awaitable[OperationResult]]
    ) -> OperationResult:
        log.info(f"[STEP START] {name}", extra={"step": name})
        with profile_block(name) as stats:
            try:
                result = await step()
            except Exception as exc:  # noqa: BLE001 - a failed step must not stop the next one
                log.exception(f"[STEP FAILED] {name}", extra={"step": name})
                result = _failed(f"{name} failed: {exc}")
        result["step"] = name
        log.info(f"[STEP DONE] {name}: {result['message']}", extra=stats.as_log_extra())
        return result

    async def startup(self, today: Optional[date] = None) -> List[OperationResult]:
        """
        Cleanup, then backfill if the store is empty, then one incremental fetch.

        Each step runs even when an earlier one failed.
        """

        async def cleanup() -> OperationResult:
            removed = self.store.clean_bad_data()
            return _ok(
                f"Removed {removed.invalid_dates} invalid dates and "
                f"{removed.zero_index} zero-index rows",
                data=removed,
                count=removed.total,
            )

        async def backfill() -> OperationResult:
            if self.store.count() > 0:
                return _ok("Store already populated, backfill skipped", count=0)
            loaded = await self.backfill(today)
            return _ok(f"Backfilled {loaded} records", count=loaded)

        async def fetch_latest() -> OperationResult:
            stored = await self._scrape_and_store()
            return _ok(f"Fetched {stored} records", count=stored)

        return [
            await self._run_step("cleanup", cleanup),
            await self._run_step("backfill", backfill),
            await self._run_step("fetch_latest", fetch_latest),
        ]

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def _read(self, name: str, query: Callable[[], Any]) -> OperationResult:
        try:
            value = query()
        except Exception as exc:  # noqa: BLE001 - reported to the caller
            log.exception(f"{name} failed")
            return _failed(f"{name} failed: {exc}")
        if isinstance(value, list):
            return _ok(f"{len(value)} entries", data=value, count=len(value))
        return _ok("ok", data=value)

    async def latest_prices(self, limit: Optional[int] = None) -> OperationResult:
        """Most recent records; scrapes once first when the store is empty."""
        limit = limit or self.settings.latest_limit
        try:
            if self.store.count() == 0:
                log.info("No records stored, scraping")
                await self._scrape_and_store()
        except Exception as exc:  # noqa: BLE001 - reported to the caller
            log.exception("Initial scrape for latest prices failed")
            return _failed(f"latest failed: {exc}")
        return self._read("latest", lambda: self.store.latest(limit))

    def history(self, days: Optional[int] = None) -> OperationResult:
        days = days or self.settings.history_days
        return self._read("history", lambda: self.store.history(days))

    def records_between(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> OperationResult:
        return self._read("range", lambda: self.store.date_range(start, end))

    def monthly(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Optional[date] = None,
    ) -> OperationResult:
        """
        Stats for (year, month), or for last calendar month when both are omitted.

        Giving only one of the two is reported as a failure.
        """
        if (year is None) != (month is None):
            return _failed("monthly failed: year and month must be given together")
        if year and month:
            return self._read("monthly", lambda: self.store.monthly_average(year, month))
        return self._read("monthly", lambda: self.store.last_month_stats(today))

    def range_stats(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> OperationResult:
        return self._read("range_stats", lambda: self.store.range_stats(start, end))

    def trends(self, today: Optional[date] = None) -> OperationResult:
        return self._read("trends", lambda: self.store.trends(today))

    def monthly_comparison(
        self, months: int = 6, today: Optional[date] = None
    ) -> OperationResult:
        return self._read(
            "monthly_comparison", lambda: self.store.monthly_comparison(months, today)
        )

    def yearly(
        self, year: Optional[int] = None, today: Optional[date] = None
    ) -> OperationResult:
        return self._read("yearly", lambda: self.store.yearly_stats(year, today))

    def all_time(self) -> OperationResult:
        return self._read("all_time", self.store.all_time_stats)

    def clean(self) -> OperationResult:
        return self._read("cleanup", self.store.clean_bad_data)

    def export_csv(
        self, start: Optional[str] = None, end: Optional[str] = None
    ) -> OperationResult:
        """CSV text of the stored records (optionally bounded), newest first."""
        return self._read("export", lambda: to_csv(self.store.date_range(start, end)))


__all__ = ["MarketService", "OperationResult"]
