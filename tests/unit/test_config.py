from __future__ import annotations

import pytest

from cattle_tracker.config import DEFAULT_SOURCE_URL, Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DB_PATH", "SCRAPE_TIMEOUT", "INDEX_MIN", "INDEX_MAX", "BACKFILL_MONTHS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.db_path == "data/prices.db"
    assert settings.source_url == DEFAULT_SOURCE_URL
    assert 10 <= settings.scrape_timeout <= 15
    assert "Mozilla" in settings.user_agent
    assert (settings.index_min, settings.index_max) == (100, 50_000)
    assert (settings.head_count_min, settings.head_count_max) == (0, 500_000)
    assert settings.backfill_months > 0


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_PATH", "/tmp/other.db")
    monkeypatch.setenv("INDEX_MAX", "80000")
    monkeypatch.setenv("LOG_JSON", "true")

    settings = Settings(_env_file=None)

    assert settings.db_path == "/tmp/other.db"
    assert settings.index_max == 80_000
    assert settings.log_json is True
