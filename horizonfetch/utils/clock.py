"""UTC calendar helpers for grid timestamps.

Every time slice of the dataset is stamped at 00:00:00 UTC on January 1st of
its year. Keeping the formatting here means the command text, the timestamp
string and the epoch seconds can never disagree.

Usage:
    from horizonfetch.utils.clock import date_str, timestamp_str, epoch_seconds
"""

from __future__ import annotations

from datetime import datetime, timezone

ZERO_HOUR = "00:00:00"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def date_str(year: int, month: int = 1, day: int = 1) -> str:
    """ISO 8601 date string: '2024-01-01'"""
    return f"{year:04d}-{month:02d}-{day:02d}"


def timestamp_str(date: str) -> str:
    """Midnight timestamp for a date: '2024-01-01 00:00:00'"""
    return f"{date} {ZERO_HOUR}"


def epoch_seconds(timestamp: str) -> int:
    """Seconds since the Unix epoch for a 'YYYY-MM-DD HH:MM:SS' UTC timestamp."""
    parsed = datetime.strptime(timestamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())
