"""
Parsing helpers for values scraped from the market listing.

The source publishes dates as ``DD/MM/YYYY`` (sometimes prefixed with a
day-name abbreviation such as ``"Ma 02/12/2025"``) and numbers in the
Latin-American convention, with ``.`` as thousands separator and ``,`` as the
decimal separator. All helpers here are pure and never raise on bad input.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Optional

_SOURCE_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_NUMERIC_RE = re.compile(r"[^\d.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")

MIN_YEAR = 2020
MAX_YEAR = 2030


def parse_date(raw: Optional[str]) -> str:
    """
    Rewrite the first ``D/M/YYYY`` found in ``raw`` as ``YYYY-MM-DD``.

    Falls back to the whitespace-normalized input when no date is present, so
    the result is not guaranteed to be canonical.
    """
    cleaned = _WHITESPACE_RE.sub(" ", raw or "").strip()
    match = _SOURCE_DATE_RE.search(cleaned)
    if not match:
        return cleaned
    day, month, year = match.groups()
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def parse_number(raw: Any) -> float:
    """
    Parse a number written as ``1.234.567`` or ``1.234,56``.

    Returns 0.0 for None, empty or unparseable input.
    """
    if raw is None:
        return 0.0
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return 0.0
    cleaned = _NON_NUMERIC_RE.sub("", text.replace(".", "").replace(",", ".", 1))
    match = _LEADING_NUMBER_RE.match(cleaned)
    return float(match.group()) if match else 0.0


def is_valid_date(raw: Optional[str]) -> bool:
    """
    Sanity check for a scraped date cell.

    Only bounds are checked (month 1-12, day 1-31, year 2020-2030); days past
    the end of a short month are accepted.
    """
    if not raw:
        return False
    match = _SOURCE_DATE_RE.search(raw)
    if not match:
        return False
    day, month, year = (int(part) for part in match.groups())
    return 1 <= month <= 12 and 1 <= day <= 31 and MIN_YEAR <= year <= MAX_YEAR


def to_source_date(value: date | str) -> str:
    """
    Format a date for the source's query string (``DD/MM/YYYY``).

    Accepts a `date` or an ISO ``YYYY-MM-DD`` string; any other string
    (including an impossible ISO date) passes through unchanged.
    """
    if isinstance(value, str) and _ISO_DATE_RE.fullmatch(value.strip()):
        try:
            value = date.fromisoformat(value.strip())
        except ValueError:
            return value
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    return value


__all__ = ["parse_date", "parse_number", "is_valid_date", "to_source_date"]
