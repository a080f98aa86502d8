"""monotick.

Monotonic clocks, time units and UTC: read the clock twice, subtract,
and get an elapsed time no wall-clock adjustment can corrupt.
"""

from importlib.metadata import PackageNotFoundError, version

from monotick._clock import ClockPort, SystemClock, SystemWallClock, WallClockPort, read_ns
from monotick._errors import (
    ClockWentBackwardsError,
    DurationParseError,
    ErrorPayload,
    InvalidDelayError,
    LeapSecondError,
    MonotickError,
    NaiveDatetimeError,
    StopwatchError,
    build_error_payload,
)
from monotick._logging import JsonFormatter, configure_logging
from monotick._measure import (
    DEFAULT_SKEW_TOLERANCE,
    Measurement,
    MeasurementSummary,
    Stopwatch,
    measure_delay,
    measure_many,
    summarise,
)
from monotick._settings import LoggingSettings, MeasureSettings, Settings
from monotick._timestamp import Timestamp
from monotick._units import (
    HOUR,
    MICROSECOND,
    MILLISECOND,
    MINUTE,
    NANOSECOND,
    SECOND,
    UNIT_NAMES,
    Duration,
    parse_duration,
)
from monotick._utc import ensure_utc, format_utc, is_leap_second_stamp, parse_utc, utc_offset_of

try:
    __version__ = version("monotick")
except PackageNotFoundError:
    # Source checkout without installed metadata
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Clock
    "ClockPort",
    "SystemClock",
    "SystemWallClock",
    "WallClockPort",
    "read_ns",
    # Units
    "Duration",
    "HOUR",
    "MICROSECOND",
    "MILLISECOND",
    "MINUTE",
    "NANOSECOND",
    "SECOND",
    "UNIT_NAMES",
    "parse_duration",
    # UTC
    "ensure_utc",
    "format_utc",
    "is_leap_second_stamp",
    "parse_utc",
    "utc_offset_of",
    # Timestamp
    "Timestamp",
    # Measure
    "DEFAULT_SKEW_TOLERANCE",
    "Measurement",
    "MeasurementSummary",
    "Stopwatch",
    "measure_delay",
    "measure_many",
    "summarise",
    # Errors
    "ClockWentBackwardsError",
    "DurationParseError",
    "ErrorPayload",
    "InvalidDelayError",
    "LeapSecondError",
    "MonotickError",
    "NaiveDatetimeError",
    "StopwatchError",
    "build_error_payload",
    # Logging
    "JsonFormatter",
    "configure_logging",
    # Settings
    "LoggingSettings",
    "MeasureSettings",
    "Settings",
]
