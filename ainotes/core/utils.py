"""
Core Utilities.

Shared utility functions used across the package.
All modules should import utilities from this module.
"""

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent comparisons between
    locally generated timestamps and the ones returned by the remote store.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are returned as-is."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def touch_timestamp(previous: datetime | None) -> datetime:
    """Current UTC time, never earlier than `previous`."""
    now = utc_now()
    if previous is not None and previous > now:
        return previous
    return now


def new_token() -> str:
    """Random token for locally generated identities."""
    return uuid4().hex
