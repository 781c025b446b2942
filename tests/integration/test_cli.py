from __future__ import annotations

import pytest
from typer.testing import CliRunner

from cattle_tracker import main
from cattle_tracker.config import Settings
from cattle_tracker.infrastructure.store import PriceStore

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_settings(monkeypatch: pytest.MonkeyPatch, test_settings: Settings) -> Settings:
    monkeypatch.setattr(main, "get_settings", lambda: test_settings)
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    return test_settings


def _seed(settings: Settings, make_record) -> None:
    with PriceStore(settings.db_path) as store:
        store.upsert_many(
            [
                make_record("2026-03-02", index=2845.5, head_count=8032, amount=1234.5),
                make_record("2026-03-03", index=0),
            ]
        )


def test_export_prints_csv(cli_settings: Settings, make_record) -> None:
    _seed(cli_settings, make_record)

    result = runner.invoke(main.app, ["export"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "Fecha,Cabezas,Importe,INMAG",
        "2026-03-03,1000,1000000.0,0.0",
        "2026-03-02,8032,1234.5,2845.5",
    ]


def test_clean_reports_removed_rows(cli_settings: Settings, make_record) -> None:
    _seed(cli_settings, make_record)

    result = runner.invoke(main.app, ["clean"])

    assert result.exit_code == 0
    assert "Removed 0 invalid dates and 1 zero-index rows." in result.output
    with PriceStore(cli_settings.db_path) as store:
        assert store.count() == 1


def test_failed_operation_exits_non_zero() -> None:
    result = runner.invoke(main.app, ["monthly", "--year", "2026"])

    assert result.exit_code == 1
    assert "together" in result.output


def test_history_rejects_half_open_range() -> None:
    result = runner.invoke(main.app, ["history", "--start", "2026-03-01"])

    assert result.exit_code == 2
