"""Time units and the :class:`Duration` value type.

Durations are stored as signed integer **nanoseconds**, the resolution
of ``time.monotonic_ns()``.  Floats are only produced on the way out
(:meth:`Duration.total_seconds`, :meth:`Duration.in_units`), so adding
many small intervals never accumulates rounding error.

String form mirrors what people write by hand::

    0s  750ns  1.5µs  12.5ms  1.5s  2m3.5s  1h0m0s

and :func:`parse_duration` reads the same grammar back, one or more
``<number><unit>`` groups with an optional leading sign.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import timedelta
from fractions import Fraction

from monotick._errors import DurationParseError, InvalidDelayError

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

UNIT_NAMES: dict[str, int] = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC greek mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}

_GROUP = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([+-])?((?:{_GROUP})+)")
_GROUP_RE = re.compile(_GROUP)


def _with_fraction(value: int, unit: int) -> str:
    """Render non-negative *value* in *unit*, trimming trailing zeros."""
    whole, rem = divmod(value, unit)
    if not rem:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{rem:0{digits}d}".rstrip("0")


@dataclass(frozen=True, slots=True, order=True)
class Duration:
    """A signed length of time in integer nanoseconds.

    Example::

        d = Duration.of(1.5, SECOND)
        assert d.nanoseconds == 1_500_000_000
        assert str(d) == "1.5s"
        assert d + Duration.of(500, MILLISECOND) == Duration.of(2, SECOND)
    """

    nanoseconds: int = 0

    # -- constructors -------------------------------------------------------

    @classmethod
    def of(cls, value: float, unit: int) -> Duration:
        """Build a duration of *value* multiples of *unit* (rounded to 1ns)."""
        if isinstance(value, int):
            return cls(value * unit)
        return cls(round(value * unit))

    @classmethod
    def from_seconds(cls, seconds: float) -> Duration:
        return cls.of(seconds, SECOND)

    @classmethod
    def from_timedelta(cls, td: timedelta) -> Duration:
        return cls((td // timedelta(microseconds=1)) * MICROSECOND)

    # -- conversions --------------------------------------------------------

    def total_seconds(self) -> float:
        return self.nanoseconds / SECOND

    def in_units(self, unit: int) -> float:
        """Return the duration expressed as a (possibly fractional) count of *unit*."""
        return self.nanoseconds / unit

    def to_timedelta(self) -> timedelta:
        """Convert to :class:`~datetime.timedelta`.

        ``timedelta`` resolves microseconds only; sub-microsecond
        remainders are truncated toward zero.
        """
        micros = abs(self.nanoseconds) // MICROSECOND
        if self.nanoseconds < 0:
            micros = -micros
        return timedelta(microseconds=micros)

    # -- arithmetic ---------------------------------------------------------

    def __add__(self, other: object) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.nanoseconds + other.nanoseconds)

    def __sub__(self, other: object) -> Duration:
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.nanoseconds - other.nanoseconds)

    def __neg__(self) -> Duration:
        return Duration(-self.nanoseconds)

    def __abs__(self) -> Duration:
        return Duration(abs(self.nanoseconds))

    def __mul__(self, factor: object) -> Duration:
        if not isinstance(factor, int) or isinstance(factor, bool):
            return NotImplemented
        return Duration(self.nanoseconds * factor)

    __rmul__ = __mul__

    def __floordiv__(self, divisor: object) -> Duration:
        if not isinstance(divisor, int) or isinstance(divisor, bool):
            return NotImplemented
        return Duration(self.nanoseconds // divisor)

    def __bool__(self) -> bool:
        return self.nanoseconds != 0

    # -- formatting ---------------------------------------------------------

    def __str__(self) -> str:
        ns = self.nanoseconds
        if ns == 0:
            return "0s"
        sign = "-" if ns < 0 else ""
        ns = abs(ns)

        if ns < MICROSECOND:
            return f"{sign}{ns}ns"
        if ns < MILLISECOND:
            return f"{sign}{_with_fraction(ns, MICROSECOND)}µs"
        if ns < SECOND:
            return f"{sign}{_with_fraction(ns, MILLISECOND)}ms"

        hours, ns = divmod(ns, HOUR)
        minutes, ns = divmod(ns, MINUTE)
        seconds = _with_fraction(ns, SECOND)
        if hours:
            return f"{sign}{hours}h{minutes}m{seconds}s"
        if minutes:
            return f"{sign}{minutes}m{seconds}s"
        return f"{sign}{seconds}s"


ZERO = Duration(0)


def parse_duration(text: str) -> Duration:
    """Parse a duration string such as ``"1h30m"``, ``"250ms"`` or ``"-1.5s"``.

    A bare ``"0"`` (optionally signed) is accepted; any other number
    needs a unit.  Fractions are exact: ``"0.1s"`` is exactly
    100 000 000ns.

    Raises:
        DurationParseError: If *text* is not a valid duration.
    """
    stripped = text.strip()
    if stripped in {"0", "+0", "-0"}:
        return ZERO

    match = _DURATION_RE.fullmatch(stripped)
    if match is None:
        raise DurationParseError(f"invalid duration {text!r}")

    total = Fraction(0)
    for number, unit in _GROUP_RE.findall(match.group(2)):
        total += Fraction(number) * UNIT_NAMES[unit]

    nanoseconds = int(total)
    return Duration(-nanoseconds if match.group(1) == "-" else nanoseconds)


def coerce_duration(value: Duration | float | str) -> Duration:
    """Accept a :class:`Duration`, a number of seconds or a duration string.

    Raises:
        DurationParseError: If a string is not a valid duration.
        InvalidDelayError: If a number is infinite or NaN.
    """
    if isinstance(value, Duration):
        return value
    if isinstance(value, str):
        return parse_duration(value)
    if not math.isfinite(value):
        raise InvalidDelayError(f"duration must be a finite number of seconds, got {value!r}")
    return Duration.from_seconds(value)
