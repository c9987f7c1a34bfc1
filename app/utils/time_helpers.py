"""
Timestamp helpers shared by the extraction and projection services.

Firestore returns timezone-aware datetimes, seed files and older documents
carry ISO strings (sometimes with a trailing 'Z'). Everything is normalized
to aware UTC datetimes before any arithmetic happens.
"""

from datetime import datetime, timezone
from typing import Optional, Union


def ensure_utc(value: Optional[Union[datetime, str]]) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if value is None:
        return None

    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace('Z', '+00:00'))

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Full days elapsed from start to end; never negative."""
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 86400)
