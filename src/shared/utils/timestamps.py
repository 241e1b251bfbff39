"""
Timestamp helpers.

All timestamps in the review pipeline are timezone-aware UTC datetimes in
memory and ISO-8601 strings in storage and on the wire.
"""

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """
    Serialize a datetime to ISO-8601, passing None through.

    Naive datetimes are assumed to be UTC. Output is always UTC with
    microsecond precision, so stored timestamps sort correctly as strings.

    Examples:
        >>> to_iso(datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc))
        '2024-06-10T12:00:00.000000+00:00'
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored timestamp back into an aware UTC datetime.

    Accepts datetime instances, ISO-8601 strings (a trailing "Z" included)
    and None.

    Raises:
        ValueError: If value is a string that is not ISO-8601
        TypeError: If value has an unsupported type
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Cannot parse timestamp from {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
