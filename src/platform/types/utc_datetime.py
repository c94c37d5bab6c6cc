from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Naive values (SQLite round-trips) are taken as UTC, aware values are converted"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_utc_or_none(value: Optional[datetime]) -> Optional[datetime]:
    return to_utc(value) if value is not None else None
