"""
Cattle Price Tracker - daily INMAG indicators from the Mercado Agroganadero.

This package scrapes the market's daily listing, stores one record per trading
day in a local SQLite file, and computes the statistics served to the
dashboard:

- Latest records and day-count history windows
- Monthly averages and month-over-month comparisons
- Date-range statistics with volatility (population standard deviation)
- Week-over-week and month-over-month trends
- Yearly and all-time rollups
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from cattle_tracker.config import Settings, get_settings
from cattle_tracker.domain.models import PriceRecord
from cattle_tracker.infrastructure.store import PriceStore
from cattle_tracker.parsing import is_valid_date, parse_date, parse_number
from cattle_tracker.scraper import MarketScraper, extract_records
from cattle_tracker.service import MarketService, OperationResult
from cattle_tracker.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "PriceRecord",
    # Parsing
    "parse_date",
    "parse_number",
    "is_valid_date",
    # Scraping
    "MarketScraper",
    "extract_records",
    # Storage
    "PriceStore",
    # Orchestration
    "MarketService",
    "OperationResult",
    # Logging
    "configure_logging",
    "get_logger",
]
