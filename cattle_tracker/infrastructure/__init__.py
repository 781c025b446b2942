"""
Infrastructure package for the cattle price tracker.

Centralizes storage concerns (SQLite connection factory, the price store).
Keep this layer focused on I/O and resource management, decoupled from
scraping and orchestration logic.
"""

from cattle_tracker.infrastructure.db_factory import connect, init_schema
from cattle_tracker.infrastructure.store import PriceStore, StoreClosedError

__all__ = [
    "connect",
    "init_schema",
    "PriceStore",
    "StoreClosedError",
]
