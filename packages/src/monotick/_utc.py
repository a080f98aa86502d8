"""UTC normalisation, RFC 3339 formatting and leap-second detection.

UTC is the only timezone monotick stores.  Local time is a display
concern: convert at the edge with :meth:`datetime.astimezone`.

Python's :class:`~datetime.datetime` cannot represent a leap second
(``23:59:60``).  Rather than silently folding one into the next
second, :func:`parse_utc` refuses it with :class:`LeapSecondError`.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from monotick._errors import LeapSecondError, NaiveDatetimeError

_LEAP_SECOND_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:60(?:[.,]\d+)?(?:[Zz]|[+-]\d{2}:?\d{2})?"
)


def ensure_utc(dt: datetime) -> datetime:
    """Return *dt* converted to UTC.

    Raises:
        NaiveDatetimeError: If *dt* carries no timezone.
    """
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise NaiveDatetimeError(
            f"naive datetime {dt.isoformat()} has no timezone; attach one before converting to UTC"
        )
    return dt.astimezone(UTC)


def format_utc(dt: datetime) -> str:
    """Format an aware datetime as RFC 3339 UTC with a ``Z`` suffix.

    Microseconds are included only when non-zero::

        2026-10-17T09:30:00Z
        2026-10-17T09:30:00.250000Z
    """
    utc = ensure_utc(dt)
    timespec = "microseconds" if utc.microsecond else "seconds"
    return utc.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"


def is_leap_second_stamp(text: str) -> bool:
    """Return ``True`` if *text* is an RFC 3339 date-time at second 60."""
    return _LEAP_SECOND_RE.fullmatch(text.strip()) is not None


def parse_utc(text: str) -> datetime:
    """Parse an RFC 3339 timestamp and return it as an aware UTC datetime.

    Accepts a ``Z`` suffix or a numeric offset.

    Raises:
        LeapSecondError: If *text* names a leap second.
        NaiveDatetimeError: If *text* has no offset.
        ValueError: If *text* is not an ISO 8601 timestamp at all.
    """
    stripped = text.strip()
    if is_leap_second_stamp(stripped):
        raise LeapSecondError(stripped)
    if stripped[-1:] in {"z", "Z"}:
        stripped = stripped[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(stripped))


def utc_offset_of(dt: datetime) -> timedelta:
    """Return the UTC offset of an aware datetime.

    Raises:
        NaiveDatetimeError: If *dt* carries no timezone.
    """
    offset = dt.utcoffset()
    if offset is None:
        raise NaiveDatetimeError(f"naive datetime {dt.isoformat()} has no UTC offset")
    return offset
