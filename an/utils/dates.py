"""Date parsing utilities for task metadata."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser

from an.utils.patterns import RFC3339_PATTERN

# Keywords resolved relative to the current local date (offset in days)
RELATIVE_DATES: dict[str, int] = {
    "today": 0,
    "tomorrow": 1,
}

# Calendar layouts accepted besides RFC3339, checked strictly so that
# "2024-5-1" or "20240501" are rejected rather than guessed at
DATE_LAYOUTS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "%Y-%m-%d"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "%Y/%m/%d"),
)


def parse_task_date(value: str, today: date | None = None) -> date | None:
    """Parse a task date token value into a calendar date.

    Supports:
    - Keywords: "today", "tomorrow" (relative to ``today``, default local date)
    - RFC3339: "2024-05-20T09:30:00Z" (date taken in the timestamp's own offset)
    - "YYYY-MM-DD" and "YYYY/MM/DD"

    Returns None if the value is empty or matches none of the above.
    """
    normalized = value.strip() if value else ""
    if not normalized:
        return None

    offset = RELATIVE_DATES.get(normalized.lower())
    if offset is not None:
        base = today if today is not None else date.today()
        return base + timedelta(days=offset)

    if RFC3339_PATTERN.match(normalized):
        try:
            return dateutil_parser.isoparse(normalized).date()
        except (ValueError, OverflowError):
            return None

    for pattern, layout in DATE_LAYOUTS:
        if pattern.match(normalized):
            try:
                return datetime.strptime(normalized, layout).date()
            except ValueError:
                return None

    return None


def format_date(value: date | None) -> str:
    """Format an optional date for display ("" when absent)."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")
