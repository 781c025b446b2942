"""
Pytest configuration for the cattle price tracker.

Provides fixtures for:
- Settings pointing at a temporary store and seed file
- An opened, empty SQLite store per test
- A record factory
- The listing HTML fixture
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Generator

import pytest

from cattle_tracker.config import Settings
from cattle_tracker.domain.models import PriceRecord
from cattle_tracker.infrastructure.store import PriceStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        _env_file=None,
        db_path=str(tmp_path / "prices.db"),
        seed_path=str(tmp_path / "historical.json"),
        source_url="https://market.test/listing",
        log_level="DEBUG",
    )


@pytest.fixture
def store(test_settings: Settings) -> Generator[PriceStore, None, None]:
    """
    Provide an opened store backed by a fresh file; closed after the test.
    """
    with PriceStore(test_settings.db_path) as opened:
        yield opened


@pytest.fixture
def make_record() -> Callable[..., PriceRecord]:
    def _make(
        day: str, index: float = 2500.0, head_count: int = 1000, amount: float = 1_000_000.0
    ) -> PriceRecord:
        return PriceRecord(date=day, head_count=head_count, total_amount=amount, index=index)

    return _make


@pytest.fixture
def listing_html() -> str:
    return (FIXTURES_DIR / "listing.html").read_text(encoding="utf-8")
