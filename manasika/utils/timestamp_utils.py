"""
Date and timestamp utilities for consistent calendar-day handling across the journal.
"""

from datetime import date, datetime
from typing import Union


def today() -> date:
    """Current calendar day from the wall clock."""
    return date.today()


def now() -> datetime:
    """Current local time."""
    return datetime.now()


def parse_date(value: Union[str, date, datetime]) -> date:
    """Revive a calendar day from an ISO string, date or datetime.

    Args:
        value: ``YYYY-MM-DD`` (a trailing time part is ignored), date or datetime

    Returns:
        date object

    Raises:
        ValueError: If the value can not be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f'Unsupported date value: {value!r}')
    return date.fromisoformat(value.strip()[:10])


def parse_datetime(value: Union[str, datetime]) -> datetime:
    """Revive a timestamp serialized with ``isoformat``.

    A trailing ``Z`` (as written by browsers) is accepted.
    """
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def format_chart_label(day: date) -> str:
    """Short chart label, e.g. ``Mon, Oct 19``."""
    return f'{day.strftime("%a")}, {day.strftime("%b")} {day.day}'
