"""
Scraper for the Mercado Agroganadero daily INMAG listing.

Fetches the listing HTML once per call, walks every table row and keeps only
the rows that pass the acceptance policy:

- the date cell holds a plausible ``DD/MM/YYYY`` date,
- the date cell is not a totals/footer row,
- the index lies strictly inside the configured bounds,
- the head count lies strictly inside the configured bounds.

Network failures never escape `MarketScraper.scrape`; they are logged and
turned into an empty result, which callers read as "no new data".
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

import httpx
from bs4 import BeautifulSoup

from cattle_tracker.aggregates import month_bounds
from cattle_tracker.config import Settings, get_settings
from cattle_tracker.domain.models import PriceRecord
from cattle_tracker.parsing import is_valid_date, parse_date, parse_number, to_source_date
from cattle_tracker.utils.logging import get_logger

log = get_logger(__name__)

_FOOTER_MARKERS = ("total", "totales")


@dataclass(frozen=True)
class AcceptancePolicy:
    """Exclusive bounds a scraped row must fall inside to become a record."""

    index_min: float = 100
    index_max: float = 50_000
    head_count_min: float = 0
    head_count_max: float = 500_000

    @classmethod
    def from_settings(cls, settings: Settings) -> "AcceptancePolicy":
        return cls(
            index_min=settings.index_min,
            index_max=settings.index_max,
            head_count_min=settings.head_count_min,
            head_count_max=settings.head_count_max,
        )

    def accepts(self, date_text: str, head_count: float, index: float) -> bool:
        if not is_valid_date(date_text):
            return False
        if is_footer(date_text):
            return False
        if not self.index_min < index < self.index_max:
            return False
        return self.head_count_min < head_count < self.head_count_max


def is_footer(date_text: str) -> bool:
    lowered = date_text.lower()
    return any(marker in lowered for marker in _FOOTER_MARKERS)


def extract_records(html: str, policy: Optional[AcceptancePolicy] = None) -> List[PriceRecord]:
    """
    Turn the listing HTML into accepted price records, in document order.

    Cells 0-3 of each row are read as (date, head count, amount, index);
    rows with fewer than four cells are ignored.
    """
    policy = policy or AcceptancePolicy()
    soup = BeautifulSoup(html, "html.parser")
    records: List[PriceRecord] = []

    for row in soup.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) < 4:
            continue
        date_text, head_text, amount_text, index_text = (
            cell.get_text(strip=True) for cell in cells[:4]
        )
        head_count = int(parse_number(head_text))
        index = parse_number(index_text)
        if not policy.accepts(date_text, head_count, index):
            log.debug("Skipping row", extra={"cell": date_text})
            continue
        records.append(
            PriceRecord(
                date=parse_date(date_text),
                head_count=head_count,
                total_amount=parse_number(amount_text),
                index=index,
            )
        )

    return records


class MarketScraper:
    """
    Fetch and parse the market listing.

    Parameters
    ----------
    settings : Settings | None
        Source URL, timeout, user agent and acceptance bounds. Defaults to
        `get_settings()`.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (tests plug in `httpx.MockTransport`).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.policy = AcceptancePolicy.from_settings(self.settings)
        self._transport = transport

    def build_url(
        self, start: Optional[date | str] = None, end: Optional[date | str] = None
    ) -> str:
        """Listing URL, with a date-range filter only when both bounds are given."""
        base = self.settings.source_url
        if start is None or end is None:
            return base
        return (
            f"{base}?txtFECHAINI={to_source_date(start)}"
            f"&txtFECHAFIN={to_source_date(end)}&CP=&LISTADO=SI"
        )

    async def fetch_html(self, url: str) -> str:
        """GET the listing; raises `httpx.HTTPError` on network or status failures."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.scrape_timeout),
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def scrape(
        self, start: Optional[date | str] = None, end: Optional[date | str] = None
    ) -> List[PriceRecord]:
        """
        Scrape one listing page. Returns [] when the fetch fails.
        """
        url = self.build_url(start, end)
        try:
            html = await self.fetch_html(url)
        except httpx.HTTPError as exc:
            log.warning(
                "Scrape failed",
                extra={"url": url, "error": f"{type(exc).__name__}: {exc}"},
            )
            return []

        records = extract_records(html, self.policy)
        log.info(f"Scraped {len(records)} records", extra={"url": url, "records": len(records)})
        return records

    async def scrape_month(self, year: int, month: int) -> List[PriceRecord]:
        """Scrape every day of a calendar month (month is 1-12)."""
        first_day, last_day = month_bounds(year, month)
        log.info(
            f"Scraping {month}/{year}",
            extra={"start": first_day.isoformat(), "end": last_day.isoformat()},
        )
        return await self.scrape(first_day, last_day)

    async def scrape_months(
        self, months: Iterable[Tuple[int, int]], pause_seconds: float = 0.0
    ) -> List[PriceRecord]:
        """
        Scrape several months one after another and merge the results.

        The merged list is sorted by date ascending; when a date appears twice
        the first occurrence wins.
        """
        collected: List[PriceRecord] = []
        for position, (year, month) in enumerate(months):
            if position and pause_seconds:
                await asyncio.sleep(pause_seconds)
            collected.extend(await self.scrape_month(year, month))

        unique: dict[str, PriceRecord] = {}
        for record in sorted(collected, key=lambda r: r.date):
            unique.setdefault(record.date, record)
        return list(unique.values())


__all__ = ["AcceptancePolicy", "MarketScraper", "extract_records", "is_footer"]
