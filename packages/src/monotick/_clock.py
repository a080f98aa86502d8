"""Clock ports and system adapters.

Two kinds of clock appear throughout monotick:

- a **monotonic** clock (:class:`ClockPort`) for measuring elapsed
  time.  ``time.monotonic()`` is immune to NTP adjustments and manual
  system-clock changes.  The epoch is arbitrary; only *differences*
  between ``now()`` calls are meaningful (PEP 418).
- a **wall** clock (:class:`WallClockPort`) for calendar time in UTC.
  It can jump forwards or backwards when the system time is set, so
  it is never used to compute durations.

Both are Protocols so tests can inject deterministic fakes
(see :mod:`monotick.testing`).
"""

from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

_NS_PER_SECOND = 1_000_000_000


@runtime_checkable
class ClockPort(Protocol):
    """Monotonic clock for timing measurements.

    Implementations may additionally provide ``now_ns() -> int`` for
    integer nanosecond readings; use :func:`read_ns` to take advantage
    of it when present.
    """

    def now(self) -> float:
        """Return monotonic time in seconds.

        Returns:
            A float representing seconds from an arbitrary epoch.
            Only the *difference* between two calls is meaningful.
        """
        ...


@runtime_checkable
class WallClockPort(Protocol):
    """Calendar clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        """Return the current wall-clock time as an aware UTC datetime."""
        ...


class SystemClock:
    """Production clock wrapping ``time.monotonic()``.

    Satisfies :class:`ClockPort` via structural subtyping, no
    base-class inheritance required (PEP 544).

    Usage::

        clock = SystemClock()
        start = clock.now()
        # ... some work ...
        elapsed = clock.now() - start
    """

    def now(self) -> float:
        """Return monotonic time in seconds."""
        return time.monotonic()

    def now_ns(self) -> int:
        """Return monotonic time in integer nanoseconds."""
        return time.monotonic_ns()


class SystemWallClock:
    """Production wall clock wrapping ``datetime.now(UTC)``."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def read_ns(clock: ClockPort) -> int:
    """Read *clock* in integer nanoseconds.

    Prefers the clock's own ``now_ns()`` (no float rounding); falls back
    to scaling ``now()``.
    """
    now_ns = getattr(clock, "now_ns", None)
    if now_ns is not None:
        return int(now_ns())
    return round(clock.now() * _NS_PER_SECOND)
