"""Datetime helpers shared across the application."""

from __future__ import annotations

from datetime import UTC, datetime

__all__ = [
    "display_datetime",
    "ensure_utc",
    "hours_between",
    "utc_now",
]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` in UTC, treating naive values as already UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def hours_between(earlier: datetime, later: datetime) -> float:
    """Return the elapsed hours from ``earlier`` to ``later``."""
    delta = ensure_utc(later) - ensure_utc(earlier)
    return delta.total_seconds() / 3600


def display_datetime(value: datetime | None) -> str | None:
    """Return a user-friendly representation of ``value`` for terminal output."""
    if value is None:
        return None
    return ensure_utc(value).astimezone().strftime("%b %d, %Y %I:%M %p")
