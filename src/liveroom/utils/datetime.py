# File: src/liveroom/utils/datetime.py
"""UTC datetime helpers for database storage."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime as NAIVE for database storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_epoch_seconds(value: datetime) -> int:
    """Convert a naive UTC datetime to integer epoch seconds."""
    return int(value.replace(tzinfo=timezone.utc).timestamp())
