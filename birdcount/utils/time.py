"""Timestamp helpers shared by the observation model, log and search.

All timestamps handled by the library are timezone-aware UTC. Naive values
coming from callers are interpreted as UTC.
"""

from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Args:
        value: Aware or naive datetime. Naive values are taken to be UTC.

    Returns:
        Equivalent datetime with ``tzinfo=timezone.utc``

    Examples:
        >>> ensure_utc(datetime(2024, 5, 1, 12, 0)).isoformat()
        '2024-05-01T12:00:00+00:00'
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Encode a datetime in the fixed persisted text format.

    Examples:
        >>> format_timestamp(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
        '2024-05-01T12:00:00.000000Z'
    """
    return ensure_utc(value).strftime(TIMESTAMP_FORMAT)
