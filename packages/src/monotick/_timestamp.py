"""Paired wall-clock and monotonic readings.

A :class:`Timestamp` records *when* something happened twice over:

- ``wall`` is the calendar instant in UTC, for humans and logs.
- ``monotonic_ns`` is a monotonic clock reading, for arithmetic.

Subtracting two timestamps uses the monotonic readings only, so the
result is unaffected by NTP corrections, manual clock changes or
daylight-saving transitions that happen between the readings.  The
wall-clock difference is still available via
:meth:`Timestamp.wall_elapsed`, and :meth:`Timestamp.skew` reports how
far the two disagree.

Monotonic readings from different processes or hosts share no epoch
and must never be compared.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from monotick._clock import ClockPort, SystemClock, SystemWallClock, WallClockPort, read_ns
from monotick._units import Duration
from monotick._utc import ensure_utc, format_utc


@dataclass(frozen=True, slots=True, eq=False)
class Timestamp:
    """A wall-clock plus monotonic reading pair.

    Attributes:
        wall: Aware datetime in UTC.
        monotonic_ns: Monotonic clock reading in nanoseconds.

    Equality, hashing and ordering all use ``monotonic_ns`` alone, so
    two readings of the same monotonic instant are equal even when a
    wall-clock step between them changed ``wall``.
    """

    wall: datetime
    monotonic_ns: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "wall", ensure_utc(self.wall))

    @classmethod
    def capture(
        cls,
        clock: ClockPort | None = None,
        wall_clock: WallClockPort | None = None,
    ) -> Timestamp:
        """Read both clocks back to back.

        The monotonic clock is read first; the gap between the two
        reads is a few hundred nanoseconds on real hardware.
        """
        mono = read_ns(clock if clock is not None else SystemClock())
        wall = (wall_clock if wall_clock is not None else SystemWallClock()).now()
        return cls(wall=wall, monotonic_ns=mono)

    # -- arithmetic ---------------------------------------------------------

    def __sub__(self, other: object) -> Duration:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return Duration(self.monotonic_ns - other.monotonic_ns)

    def __add__(self, other: object) -> Timestamp:
        if not isinstance(other, Duration):
            return NotImplemented
        return Timestamp(
            wall=self.wall + other.to_timedelta(),
            monotonic_ns=self.monotonic_ns + other.nanoseconds,
        )

    def since(self, earlier: Timestamp) -> Duration:
        """Monotonic time elapsed from *earlier* to this timestamp."""
        return self - earlier

    def wall_elapsed(self, earlier: Timestamp) -> Duration:
        """Wall-clock time elapsed from *earlier*.

        Informational only: this can be negative, or wildly off, if
        the system clock was adjusted between the two readings.
        """
        return Duration.from_timedelta(self.wall - earlier.wall)

    def skew(self, earlier: Timestamp) -> Duration:
        """Wall-clock elapsed minus monotonic elapsed since *earlier*.

        Zero (give or take read jitter) unless the wall clock was
        stepped or slewed in between.
        """
        return self.wall_elapsed(earlier) - self.since(earlier)

    # -- equality and ordering (monotonic only) -----------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.monotonic_ns == other.monotonic_ns

    def __hash__(self) -> int:
        return hash(self.monotonic_ns)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.monotonic_ns < other.monotonic_ns

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.monotonic_ns <= other.monotonic_ns

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.monotonic_ns > other.monotonic_ns

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.monotonic_ns >= other.monotonic_ns

    # -- serialisation ------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        return {"wall": format_utc(self.wall), "monotonic_ns": self.monotonic_ns}
