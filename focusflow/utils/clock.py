"""Time and id helpers shared by the engine, analytics and storage."""

import uuid
from datetime import date, datetime, timezone
from typing import Optional, Union


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Short random id, unique enough for a single local user."""
    return uuid.uuid4().hex[:8]


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_key(value: Union[datetime, date]) -> str:
    """Calendar-day key (yyyy-mm-dd) of a timestamp or date."""
    if isinstance(value, datetime):
        value = as_utc(value).date()
    return value.isoformat()


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Serialize a timestamp to ISO-8601, keeping None."""
    return as_utc(value).isoformat() if value else None


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp.

    Returns None for anything that is not a parseable string, including
    offsets that push the instant outside the datetime range.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        return None


def parse_date(value: object) -> Optional[date]:
    """Parse a calendar date, accepting full timestamps as well."""
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
