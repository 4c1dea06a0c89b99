"""
Time value helpers for report events.
Event times are entered and displayed as HH:MM but stored in timestamp
columns anchored at 1970-01-01. No timezone conversion is ever applied.
"""
from datetime import datetime
from typing import Optional

from ..errors import ValidationError


ANCHOR_DATE = "1970-01-01"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
SHORT_TIME_MAX_LEN = 5
TIMESTAMP_MIN_LEN = 19


def normalize_time(value: Optional[str]) -> str:
    """
    Expand a short HH:MM value into the anchored storage form.

    Args:
        value: Time string as received, e.g. "08:30" or "1970-01-01 08:30:00"

    Returns:
        "1970-01-01 HH:MM:00" for short values; anything else unchanged
        (empty stays empty, full timestamps pass through)
    """
    if not value:
        return ""
    if len(value) <= SHORT_TIME_MAX_LEN:
        return f"{ANCHOR_DATE} {value}:00"
    return value


def extract_time(value: Optional[str]) -> str:
    """
    Take the HH:MM portion of a stored timestamp string.

    Values shorter than a full "YYYY-MM-DD HH:MM:SS" timestamp are returned
    verbatim.
    """
    if not value:
        return ""
    if len(value) >= TIMESTAMP_MIN_LEN:
        return value[11:16]
    return value


def to_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a normalized value into a naive datetime for the timestamp column."""
    normalized = normalize_time(value)
    if not normalized:
        return None
    try:
        return datetime.strptime(normalized, TIMESTAMP_FORMAT)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        raise ValidationError(f"Invalid time value: {value!r}")
    # Wall-clock value is kept as given; an offset is dropped, not applied
    return parsed.replace(tzinfo=None)


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(TIMESTAMP_FORMAT)


def display_time(value: Optional[datetime]) -> str:
    """Stored timestamp -> HH:MM."""
    return extract_time(format_timestamp(value))
