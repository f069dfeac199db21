from __future__ import annotations

from datetime import date, datetime, timedelta

_ONE_DAY = timedelta(days=1)
_SATURDAY = 5


def _as_calendar_date(value: date) -> date:
    """Drop any time-of-day component so iteration runs on whole days."""
    if isinstance(value, datetime):
        return value.date()
    return value


def calculate_working_days(start: date, end: date) -> int:
    """Count the Monday-Friday days in the inclusive range [start, end].

    Returns 0 when ``end`` precedes ``start`` or the range only covers a
    weekend. Ranges are short, so days are walked one by one.
    """
    current = _as_calendar_date(start)
    last = _as_calendar_date(end)

    working_days = 0
    while current <= last:
        if current.weekday() < _SATURDAY:
            working_days += 1
        current += _ONE_DAY
    return working_days
