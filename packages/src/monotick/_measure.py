"""Elapsed-time measurement: read, wait, read, subtract.

:func:`measure_delay` is the whole idea in one call::

    start = Timestamp.capture()
    time.sleep(delay)
    end = Timestamp.capture()
    elapsed = end - start

It returns a :class:`Measurement` holding both readings and the
derived durations.  :class:`Stopwatch` is the same pattern for ad-hoc
timing of a block of code.

Clocks and the sleep function are injectable so tests can run with
:mod:`monotick.testing` doubles and never block.
"""

from __future__ import annotations

import logging
import statistics
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from types import TracebackType

from monotick._clock import ClockPort, SystemClock, WallClockPort, read_ns
from monotick._errors import ClockWentBackwardsError, InvalidDelayError, StopwatchError
from monotick._timestamp import Timestamp
from monotick._units import MILLISECOND, ZERO, Duration, coerce_duration

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], None]

#: Wall/monotonic disagreement a measurement may show before it counts
#: as skew.  Below this, the gap is read jitter between the two clocks.
DEFAULT_SKEW_TOLERANCE = Duration.of(50, MILLISECOND)

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Measurement:
    """Result of one read-wait-read cycle."""

    start: Timestamp
    end: Timestamp
    requested: Duration

    @property
    def elapsed(self) -> Duration:
        """Monotonic elapsed time, always ``>= 0``."""
        return self.end - self.start

    @property
    def wall_elapsed(self) -> Duration:
        return self.end.wall_elapsed(self.start)

    @property
    def skew(self) -> Duration:
        return self.end.skew(self.start)

    @property
    def overshoot(self) -> Duration:
        """How much longer than requested the wait took."""
        return self.elapsed - self.requested

    def to_dict(self) -> dict[str, object]:
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "requested_ns": self.requested.nanoseconds,
            "elapsed_ns": self.elapsed.nanoseconds,
            "wall_elapsed_ns": self.wall_elapsed.nanoseconds,
            "skew_ns": self.skew.nanoseconds,
        }


@dataclass(frozen=True, slots=True)
class MeasurementSummary:
    """Aggregate statistics over several measurements."""

    count: int
    minimum: Duration
    maximum: Duration
    mean: Duration
    total: Duration
    skew_observed: bool

    def to_dict(self) -> dict[str, object]:
        return {
            "count": self.count,
            "min_ns": self.minimum.nanoseconds,
            "max_ns": self.maximum.nanoseconds,
            "mean_ns": self.mean.nanoseconds,
            "total_ns": self.total.nanoseconds,
            "skew_observed": self.skew_observed,
        }


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def measure_delay(
    delay: Duration | float | str,
    *,
    clock: ClockPort | None = None,
    wall_clock: WallClockPort | None = None,
    sleep: SleepFunc = time.sleep,
    skew_tolerance: Duration = DEFAULT_SKEW_TOLERANCE,
) -> Measurement:
    """Capture a timestamp, block for *delay*, capture again.

    Args:
        delay: How long to wait: a :class:`Duration`, seconds as a
            number, or a duration string such as ``"250ms"``.
        clock: Monotonic clock.  Defaults to :class:`SystemClock`.
        wall_clock: Wall clock.  Defaults to the system UTC clock.
        sleep: Blocking wait function taking seconds.
        skew_tolerance: Wall/monotonic disagreement above which a
            warning is logged.

    Returns:
        The :class:`Measurement` for this cycle.

    Raises:
        InvalidDelayError: If *delay* is negative, infinite or NaN.
        ClockWentBackwardsError: If the monotonic clock decreased
            between the two readings.
    """
    requested = coerce_duration(delay)
    if requested < ZERO:
        raise InvalidDelayError(f"delay must not be negative, got {requested}")

    clock = clock if clock is not None else SystemClock()
    start = Timestamp.capture(clock, wall_clock)
    sleep(requested.total_seconds())
    end = Timestamp.capture(clock, wall_clock)

    if end.monotonic_ns < start.monotonic_ns:
        raise ClockWentBackwardsError(start.monotonic_ns, end.monotonic_ns)

    measurement = Measurement(start=start, end=end, requested=requested)
    logger.debug(
        "Measured %s for requested %s (wall %s)",
        measurement.elapsed,
        requested,
        measurement.wall_elapsed,
    )
    if abs(measurement.skew) > skew_tolerance:
        logger.warning(
            "Wall clock moved %s relative to the monotonic clock during measurement",
            measurement.skew,
        )
    return measurement


def measure_many(
    delay: Duration | float | str,
    count: int,
    *,
    clock: ClockPort | None = None,
    wall_clock: WallClockPort | None = None,
    sleep: SleepFunc = time.sleep,
    skew_tolerance: Duration = DEFAULT_SKEW_TOLERANCE,
) -> list[Measurement]:
    """Run :func:`measure_delay` *count* times, one after another.

    Raises:
        ValueError: If *count* is less than 1.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    return [
        measure_delay(
            delay,
            clock=clock,
            wall_clock=wall_clock,
            sleep=sleep,
            skew_tolerance=skew_tolerance,
        )
        for _ in range(count)
    ]


def summarise(
    measurements: Sequence[Measurement],
    skew_tolerance: Duration = DEFAULT_SKEW_TOLERANCE,
) -> MeasurementSummary:
    """Summarise elapsed times over a non-empty sequence of measurements.

    ``skew_observed`` is set when any measurement's skew exceeds
    *skew_tolerance* in either direction.

    Raises:
        ValueError: If *measurements* is empty.
    """
    if not measurements:
        raise ValueError("cannot summarise an empty sequence of measurements")
    elapsed = [m.elapsed.nanoseconds for m in measurements]
    total = sum(elapsed)
    return MeasurementSummary(
        count=len(elapsed),
        minimum=Duration(min(elapsed)),
        maximum=Duration(max(elapsed)),
        mean=Duration(round(statistics.fmean(elapsed))),
        total=Duration(total),
        skew_observed=any(abs(m.skew) > skew_tolerance for m in measurements),
    )


# ---------------------------------------------------------------------------
# Stopwatch
# ---------------------------------------------------------------------------


class Stopwatch:
    """Measure elapsed monotonic time around a block of code.

    Usage::

        with Stopwatch() as sw:
            do_work()
        print(sw.elapsed())

    ``elapsed()`` while running returns time since ``start()``; after
    ``stop()`` it returns the frozen interval.
    """

    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock if clock is not None else SystemClock()
        self._started_ns: int | None = None
        self._stopped_ns: int | None = None

    @property
    def running(self) -> bool:
        return self._started_ns is not None and self._stopped_ns is None

    def start(self) -> Stopwatch:
        """Start (or restart) the stopwatch."""
        self._started_ns = read_ns(self._clock)
        self._stopped_ns = None
        return self

    def stop(self) -> Duration:
        """Stop the stopwatch and return the elapsed time.

        Raises:
            StopwatchError: If the stopwatch was never started.
        """
        if self._started_ns is None:
            raise StopwatchError("stop() called before start()")
        if self._stopped_ns is None:
            self._stopped_ns = read_ns(self._clock)
        return self.elapsed()

    def elapsed(self) -> Duration:
        """Return the elapsed time so far.

        Raises:
            StopwatchError: If the stopwatch was never started.
            ClockWentBackwardsError: If the clock decreased.
        """
        if self._started_ns is None:
            raise StopwatchError("elapsed() called before start()")
        end_ns = self._stopped_ns if self._stopped_ns is not None else read_ns(self._clock)
        if end_ns < self._started_ns:
            raise ClockWentBackwardsError(self._started_ns, end_ns)
        return Duration(end_ns - self._started_ns)

    def __enter__(self) -> Stopwatch:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
