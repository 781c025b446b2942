"""
SQLite connection factory for the cattle price tracker.

The store lives in a single on-disk SQLite file holding the `price_records`
table keyed by `fecha`. Opening a connection retries transient
`sqlite3.OperationalError`s (locked or briefly unavailable file) using tenacity.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cattle_tracker.utils.logging import get_logger

log = get_logger(__name__)

MEMORY_PATH = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS price_records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fecha TEXT UNIQUE NOT NULL,
    cabezas INTEGER DEFAULT 0,
    importe REAL DEFAULT 0,
    inmag REAL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_fecha ON price_records(fecha);
"""


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(sqlite3.OperationalError),
    reraise=True,
)
def connect(db_path: str | Path) -> sqlite3.Connection:
    """
    Open a connection to the store file, creating parent directories as needed.

    Retries up to 3 times with exponential backoff for transient errors.

    Raises
    ------
    sqlite3.OperationalError
        If the file cannot be opened after all retry attempts.
    """
    if str(db_path) != MEMORY_PATH:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the price table and its date index (idempotent)."""
    conn.executescript(SCHEMA)
    log.debug("Schema ready")


__all__ = ["SCHEMA", "MEMORY_PATH", "connect", "init_schema"]
