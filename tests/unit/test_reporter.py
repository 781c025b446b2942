from __future__ import annotations

from rich.console import Console

from cattle_tracker.reporter import print_records, print_stats, print_steps, print_trends


def _console() -> Console:
    return Console(record=True, width=120)


def test_print_records_renders_rows() -> None:
    console = _console()
    print_records(
        [{"fecha": "2026-01-20", "cabezas": 8032, "importe": 1234.5, "inmag": 2845.12}],
        console=console,
    )
    text = console.export_text()
    assert "2026-01-20" in text
    assert "8,032" in text
    assert "2,845.12" in text


def test_print_records_empty() -> None:
    console = _console()
    print_records([], console=console)
    assert "No records" in console.export_text()


def test_print_stats_with_breakdown() -> None:
    console = _console()
    print_stats(
        {
            "days": 2,
            "avg_index": 2500.0,
            "volatility": None,
            "months": [{"year": 2026, "month": 1, "month_name": "Enero", "days": 2}],
        },
        title="INMAG 2026",
        console=console,
    )
    text = console.export_text()
    assert "INMAG avg" in text
    assert "2,500.00" in text
    assert "Enero 2026" in text


def test_print_trends_and_steps() -> None:
    console = _console()
    print_trends(
        {
            "reference_date": "2026-03-15",
            "weekly": {"current": 2200.0, "previous": 2000.0, "change_percent": 10.0},
            "monthly": {"current": 2100.0, "previous": None, "change_percent": None},
        },
        console=console,
    )
    print_steps([{"step": "cleanup", "success": True, "message": "done"}], console=console)
    text = console.export_text()
    assert "+10.00%" in text
    assert "cleanup" in text
