"""
Download historical INMAG data into the bundled seed file.

Scrapes each requested month (with a pause between requests), merges the
results sorted by date without duplicate days, and writes them in seed shape
to `data/historical.json` (or --output).
"""

from __future__ import annotations

import asyncio
import statistics
import sys
from pathlib import Path
from typing import List, Tuple

import typer

from cattle_tracker.config import get_settings
from cattle_tracker.scraper import MarketScraper
from cattle_tracker.seed import write_seed
from cattle_tracker.utils.logging import configure_logging

app = typer.Typer(help="Scrape months of INMAG history into the seed file.")


def _parse_month(value: str) -> Tuple[int, int]:
    """Parse YYYY-MM into (year, month)."""
    try:
        year_text, month_text = value.split("-", 1)
        year, month = int(year_text), int(month_text)
    except ValueError as exc:
        raise typer.BadParameter(f"Expected YYYY-MM, got {value!r}") from exc
    if not 1 <= month <= 12:
        raise typer.BadParameter(f"Month out of range in {value!r}")
    return year, month


@app.command()
def main(
    months: List[str] = typer.Option(
        ...,
        "--month",
        "-m",
        help="Month to download as YYYY-MM; repeat for several months.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Seed file to write (defaults to SEED_PATH).",
    ),
    pause: float = typer.Option(
        1.0,
        "--pause",
        help="Seconds to wait between month requests.",
    ),
) -> None:
    """
    Download the given months and write them to the seed file.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level)
    target = output or Path(settings.seed_path)
    wanted = [_parse_month(value) for value in months]

    scraper = MarketScraper(settings)
    records = asyncio.run(scraper.scrape_months(wanted, pause_seconds=pause))
    written = write_seed(target, records)
    typer.echo(f"Total unique records: {written} -> {target}")

    for record in records:
        typer.echo(f"{record.date}: cabezas={record.head_count}, inmag={record.index}")
    if records:
        typer.echo(f"Overall avg INMAG: {statistics.fmean(r.index for r in records):.2f}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
