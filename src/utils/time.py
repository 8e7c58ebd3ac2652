from __future__ import annotations

from contextlib import suppress
from datetime import date, datetime
from typing import Any


def parse_date(value: Any) -> date | None:
    """Parse common date formats (ISO, ACRIS timestamps, MM/DD/YYYY) to a date object."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        with suppress(ValueError):
            return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
        for fmt in ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%m/%d/%Y %I:%M:%S %p", "%Y%m%d"):
            with suppress(ValueError):
                return datetime.strptime(raw, fmt).date()
    return None


def format_mmddyyyy(value: Any) -> str:
    """Format a date-like value as MM/DD/YYYY, passing unparseable strings through."""
    parsed = parse_date(value)
    if parsed is None:
        return str(value) if value else ""
    return parsed.strftime("%m/%d/%Y")
