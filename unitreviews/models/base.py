"""Shared helpers for SQLModel tables."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    Timestamps are stored without tzinfo (MariaDB DATETIME and SQLite both
    drop it), so every comparison in the code uses naive UTC values.
    """
    return datetime.now(UTC).replace(tzinfo=None)
