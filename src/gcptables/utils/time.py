"""Time utilities for RFC 3339 timestamps returned by Google APIs."""

import re
from datetime import datetime, timezone

# Google APIs may send up to nanosecond precision; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime.

    Args:
        value: Timestamp such as '2024-01-15T12:00:00.123456789Z'

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If the value is not a valid timestamp

    Example:
        >>> parse_rfc3339("2024-01-15T12:00:00Z")
        datetime.datetime(2024, 1, 15, 12, 0, tzinfo=datetime.timezone.utc)
    """
    text = _FRACTION_RE.sub(r"\1", value.strip()).replace("Z", "+00:00").replace("z", "+00:00")
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_utc_z(dt: datetime) -> str:
    """
    Convert datetime to ISO 8601 UTC string with Z suffix.

    Args:
        dt: Datetime object (must be timezone-aware)

    Returns:
        ISO 8601 UTC timestamp ending with 'Z' (e.g., '2025-12-23T00:27:07.804867Z')

    Raises:
        ValueError: If datetime is naive (not timezone-aware)
    """
    if dt.tzinfo is None:
        raise ValueError(
            f"Naive datetime not allowed. Got {dt}. "
            "Use datetime.now(timezone.utc) or dt.replace(tzinfo=timezone.utc)"
        )
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
