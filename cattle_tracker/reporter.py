from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

_STAT_LABELS = {
    "days": "Days",
    "first_date": "First date",
    "last_date": "Last date",
    "avg_index": "INMAG avg",
    "min_index": "INMAG min",
    "max_index": "INMAG max",
    "avg_head_count": "Cabezas avg",
    "total_head_count": "Cabezas total",
    "avg_amount": "Importe avg",
    "total_amount": "Importe total",
    "volatility": "Volatility (stddev)",
    "volatility_percent": "Volatility %",
}


def _fmt(value: Any, decimals: int = 2) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, int):
        return f"{value:,}"
    if isinstance(value, float):
        return f"{value:,.{decimals}f}"
    return str(value)


def _fmt_change(value: Optional[float]) -> str:
    if value is None:
        return "-"
    color = "green" if value >= 0 else "red"
    return f"[{color}]{value:+.2f}%[/{color}]"


def print_records(
    records: List[Dict[str, Any]], title: str = "INMAG", console: Optional[Console] = None
) -> None:
    """
    Render stored records (seed/alias shape) newest first.
    """
    console = console or Console()
    if not records:
        console.print("[yellow]No records to display.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Fecha", style="cyan", no_wrap=True)
    table.add_column("Cabezas", justify="right", style="magenta")
    table.add_column("Importe", justify="right", style="green")
    table.add_column("INMAG", justify="right", style="bold green")

    for record in records:
        table.add_row(
            str(record.get("fecha")),
            _fmt(record.get("cabezas")),
            _fmt(record.get("importe")),
            _fmt(record.get("inmag")),
        )
    console.print(table)


def _breakdown_table(title: str, label: str, rows: Iterable[Dict[str, Any]]) -> Table:
    table = Table(title=title, box=box.SIMPLE)
    table.add_column(label, style="cyan", no_wrap=True)
    table.add_column("Days", justify="right")
    table.add_column("INMAG avg", justify="right", style="bold green")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Cabezas", justify="right", style="magenta")
    for row in rows:
        key = row.get("month_name") or row.get("year")
        if row.get("month_name") and row.get("year"):
            key = f"{row['month_name']} {row['year']}"
        table.add_row(
            str(key),
            _fmt(row.get("days")),
            _fmt(row.get("avg_index")),
            _fmt(row.get("min_index")),
            _fmt(row.get("max_index")),
            _fmt(row.get("total_head_count")),
        )
    return table


def print_stats(stats: Dict[str, Any], title: str, console: Optional[Console] = None) -> None:
    """
    Render a statistics payload (monthly, range, yearly or all-time).

    Monthly/yearly breakdowns, when present, are rendered as extra tables.
    """
    console = console or Console()
    table = Table(title=title, box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="bold")
    for key, label in _STAT_LABELS.items():
        if key in stats:
            table.add_row(label, _fmt(stats[key]))
    console.print(table)

    if stats.get("months"):
        console.print(_breakdown_table("By month", "Month", stats["months"]))
    if stats.get("years"):
        console.print(_breakdown_table("By year", "Year", stats["years"]))


def print_monthly_comparison(
    months: List[Dict[str, Any]], console: Optional[Console] = None
) -> None:
    console = console or Console()
    if not months:
        console.print("[yellow]No monthly data to compare.[/yellow]")
        return
    console.print(_breakdown_table("Monthly comparison", "Month", months))


def print_trends(trends: Dict[str, Any], console: Optional[Console] = None) -> None:
    console = console or Console()
    table = Table(
        title="INMAG trends",
        box=box.ROUNDED,
        caption=f"Reference date {trends.get('reference_date')}",
    )
    table.add_column("Period", style="cyan", no_wrap=True)
    table.add_column("Current", justify="right", style="bold green")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")

    for key, label in (("weekly", "Last 7 days"), ("monthly", "This month")):
        comparison = trends.get(key) or {}
        table.add_row(
            label,
            _fmt(comparison.get("current")),
            _fmt(comparison.get("previous")),
            _fmt_change(comparison.get("change_percent")),
        )
    console.print(table)


def print_steps(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """Render the outcome of each startup step."""
    console = console or Console()
    table = Table(title="Startup", box=box.ROUNDED)
    table.add_column("Step", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Message")
    for result in results:
        status = "[green]ok[/green]" if result.get("success") else "[red]failed[/red]"
        table.add_row(str(result.get("step", "-")), status, str(result.get("message", "")))
    console.print(table)
