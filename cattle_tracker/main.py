from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer

from cattle_tracker.config import get_settings
from cattle_tracker.infrastructure.store import PriceStore
from cattle_tracker.reporter import (
    print_monthly_comparison,
    print_records,
    print_stats,
    print_steps,
    print_trends,
)
from cattle_tracker.service import MarketService, OperationResult
from cattle_tracker.utils.logging import configure_logging

app = typer.Typer(help="Cattle market INMAG tracker CLI.")

as_json_option = typer.Option(False, "--json", help="Print the raw result as JSON.")


def _service(store: PriceStore) -> MarketService:
    return MarketService(store, settings=get_settings())


def _open_store() -> PriceStore:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return PriceStore(settings.db_path).open()


def _unwrap(result: OperationResult, as_json: bool) -> Optional[object]:
    """Exit non-zero on failure; echo JSON when asked, else hand back the data."""
    if not result.get("success"):
        typer.echo(result.get("message", "failed"), err=True)
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(json.dumps(result, indent=2, default=str))
        return None
    return result.get("data")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_path} | source={settings.source_url} | "
        f"timeout={settings.scrape_timeout}s | "
        f"index=({settings.index_min}, {settings.index_max}) "
        f"cabezas=({settings.head_count_min}, {settings.head_count_max})"
    )


@app.command()
def startup() -> None:
    """
    Run cleanup, backfill-if-empty and one incremental fetch.
    """
    with _open_store() as store:
        results = asyncio.run(_service(store).startup())
    print_steps(list(results))
    if not all(result.get("success") for result in results):
        raise typer.Exit(code=1)


@app.command()
def refresh() -> None:
    """
    Scrape the current listing and store it.
    """
    with _open_store() as store:
        result = asyncio.run(_service(store).refresh())
    _unwrap(result, as_json=False)
    typer.echo(result["message"])


@app.command()
def latest(
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Number of records."),
    as_json: bool = as_json_option,
) -> None:
    """
    Show the most recent records.
    """
    with _open_store() as store:
        result = asyncio.run(_service(store).latest_prices(limit))
    data = _unwrap(result, as_json)
    if data is not None:
        print_records(data, title="Latest INMAG")


@app.command()
def history(
    days: Optional[int] = typer.Option(None, "--days", "-d", help="Number of days."),
    start: Optional[str] = typer.Option(None, "--start", help="ISO start date (YYYY-MM-DD)."),
    end: Optional[str] = typer.Option(None, "--end", help="ISO end date (YYYY-MM-DD)."),
    as_json: bool = as_json_option,
) -> None:
    """
    Show records for the last N days, or between --start and --end.

    --start and --end must be given together; --days is ignored when they are.
    """
    if (start is None) != (end is None):
        raise typer.BadParameter("--start and --end must be given together")
    with _open_store() as store:
        service = _service(store)
        result = service.records_between(start, end) if start and end else service.history(days)
    data = _unwrap(result, as_json)
    if data is not None:
        print_records(data, title="INMAG history")


@app.command("range")
def range_stats(
    start: Optional[str] = typer.Option(None, "--start", help="ISO start date (YYYY-MM-DD)."),
    end: Optional[str] = typer.Option(None, "--end", help="ISO end date (YYYY-MM-DD)."),
    as_json: bool = as_json_option,
) -> None:
    """
    Statistics (including volatility) between two dates.
    """
    with _open_store() as store:
        result = _service(store).range_stats(start, end)
    data = _unwrap(result, as_json)
    if data is not None:
        print_stats(data, title=f"INMAG {start or 'all'} .. {end or 'all'}")


@app.command()
def monthly(
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    month: Optional[int] = typer.Option(None, "--month", "-m", min=1, max=12),
    as_json: bool = as_json_option,
) -> None:
    """
    Monthly statistics for --year and --month; defaults to last calendar month.
    """
    with _open_store() as store:
        result = _service(store).monthly(year, month)
    data = _unwrap(result, as_json)
    if data is not None:
        print_stats(data, title=f"{data.get('month_name')} {data.get('year')}")


@app.command()
def trends(as_json: bool = as_json_option) -> None:
    """
    Week-over-week and month-over-month INMAG change.
    """
    with _open_store() as store:
        result = _service(store).trends()
    data = _unwrap(result, as_json)
    if data is not None:
        print_trends(data)


@app.command()
def compare(
    months: int = typer.Option(6, "--months", "-m", min=1, help="Months back, current included."),
    as_json: bool = as_json_option,
) -> None:
    """
    Compare the last N calendar months.
    """
    with _open_store() as store:
        result = _service(store).monthly_comparison(months)
    data = _unwrap(result, as_json)
    if data is not None:
        print_monthly_comparison(data)


@app.command()
def yearly(
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    as_json: bool = as_json_option,
) -> None:
    """
    Yearly statistics with a month-by-month breakdown.
    """
    with _open_store() as store:
        result = _service(store).yearly(year)
    data = _unwrap(result, as_json)
    if data is not None:
        print_stats(data, title=f"INMAG {data.get('year')}")


@app.command("all-time")
def all_time(as_json: bool = as_json_option) -> None:
    """
    All-time statistics with a year-by-year breakdown.
    """
    with _open_store() as store:
        result = _service(store).all_time()
    data = _unwrap(result, as_json)
    if data is not None:
        print_stats(data, title="INMAG all time")


@app.command()
def clean() -> None:
    """
    Delete rows with malformed dates or a zero index.
    """
    with _open_store() as store:
        result = _service(store).clean()
    data = _unwrap(result, as_json=False) or {}
    typer.echo(
        f"Removed {data.get('invalid_dates', 0)} invalid dates and "
        f"{data.get('zero_index', 0)} zero-index rows."
    )


@app.command()
def export(
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="CSV file to write (stdout if omitted)."
    ),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
) -> None:
    """
    Export stored records as CSV (Fecha,Cabezas,Importe,INMAG).
    """
    with _open_store() as store:
        result = _service(store).export_csv(start, end)
    text = _unwrap(result, as_json=False) or ""
    if output is None:
        typer.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote {output}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
