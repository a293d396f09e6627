"""
Canonical subscriber record and its timestamp encoding.

Wire representations carry ``confirmed_at`` as a signed count of seconds
since the Unix epoch; the canonical record carries a timezone-aware UTC
datetime. ``None`` is the "not confirmed" sentinel on both sides.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from .exceptions import InvalidRequest

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_SECOND = timedelta(seconds=1)


@dataclass(frozen=True)
class EmailEntry:
    """
    Protocol-independent subscriber record.

    Attributes:
        id: Store-assigned identifier, None when not yet persisted
        email: Normalized email address (the external key)
        confirmed_at: Confirmation time (UTC, whole seconds) or None
        opt_out: Whether the subscriber opted out
    """

    id: int | None
    email: str
    confirmed_at: datetime | None = None
    opt_out: bool = False


def from_unix_seconds(seconds: int | None) -> datetime | None:
    """
    Convert integer seconds since the epoch to a UTC datetime.

    Raises:
        InvalidRequest: If the value falls outside the datetime range
    """
    if seconds is None:
        return None
    try:
        return EPOCH + timedelta(seconds=seconds)
    except OverflowError as e:
        raise InvalidRequest(f"confirmed_at out of range: {seconds}") from e


def to_unix_seconds(moment: datetime | None) -> int | None:
    """Convert a datetime to integer seconds since the epoch (naive values are UTC)."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // _ONE_SECOND
