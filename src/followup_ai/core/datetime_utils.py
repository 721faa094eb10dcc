"""Calendar date helpers shared across the application."""

from __future__ import annotations

from datetime import date, datetime, timedelta

__all__ = [
    "add_days",
    "days_between",
    "parse_date",
    "display_date",
]


def add_days(value: date, days: int) -> date:
    """Return ``value`` shifted by whole calendar days."""
    return value + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Return the number of calendar days from ``start`` to ``end``."""
    return (end - start).days


def parse_date(value: str | date) -> date:
    """Parse an ISO 8601 date or datetime string into a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def display_date(value: date | None) -> str | None:
    """Return a user-friendly representation of ``value``."""
    if value is None:
        return None
    return value.strftime("%b %d, %Y")
