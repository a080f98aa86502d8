"""Exception hierarchy and structured error payloads.

Every error raised by monotick derives from :class:`MonotickError`.
Errors caused by bad input also derive from :class:`ValueError`, so
callers that only care about "bad value" can catch the builtin.

Payload schema (what the CLI prints with ``--json``)::

    {
        "error_type": "leap_second",
        "message": "Human-readable error description",
        "timestamp": "2026-02-14T12:34:56+00:00",
        "details": {}
    }

Consumers may pass their own ``error_type_map``.  Unknown exceptions
fall back to the generic ``"error"`` type.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class MonotickError(Exception):
    """Base class for all monotick errors."""


class DurationParseError(MonotickError, ValueError):
    """A duration string could not be parsed."""


class InvalidDelayError(MonotickError, ValueError):
    """A measurement delay was negative or otherwise unusable."""


class NaiveDatetimeError(MonotickError, ValueError):
    """A datetime without timezone information was given where UTC is required."""


class LeapSecondError(MonotickError, ValueError):
    """A timestamp names a leap second (``:60``), which datetime cannot hold.

    Attributes:
        text: The offending input string.
    """

    def __init__(self, text: str) -> None:
        super().__init__(
            f"{text!r} names a leap second; Python datetimes stop at second 59"
        )
        self.text = text


class ClockWentBackwardsError(MonotickError):
    """A monotonic clock returned a smaller reading than a previous one.

    Attributes:
        first_ns: The earlier reading.
        second_ns: The later, smaller reading.
    """

    def __init__(self, first_ns: int, second_ns: int) -> None:
        super().__init__(
            f"monotonic clock went backwards: {second_ns} < {first_ns} "
            f"(by {first_ns - second_ns}ns)"
        )
        self.first_ns = first_ns
        self.second_ns = second_ns


class StopwatchError(MonotickError):
    """A stopwatch was used out of order (e.g. read before start)."""


DEFAULT_ERROR_TYPES: dict[type[Exception], str] = {
    DurationParseError: "invalid_duration",
    InvalidDelayError: "invalid_delay",
    NaiveDatetimeError: "naive_datetime",
    LeapSecondError: "leap_second",
    ClockWentBackwardsError: "clock_went_backwards",
    StopwatchError: "stopwatch",
}

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    """Immutable structured error payload."""

    error_type: str
    message: str
    timestamp: str
    details: dict[str, object] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialise to a JSON string."""
        return json.dumps(asdict(self))


def build_error_payload(
    error: Exception,
    *,
    error_type_map: dict[type[Exception], str] | None = None,
    details: dict[str, object] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ErrorPayload:
    """Convert an exception into a structured :class:`ErrorPayload`.

    Looks up the exact class of the exception; subclasses are not matched.

    Args:
        error: The exception to convert.
        error_type_map: Mapping from exception types to machine-readable
            ``error_type`` strings.  Defaults to
            :data:`DEFAULT_ERROR_TYPES`.  Falls back to ``"error"`` for
            unmapped types.
        details: Optional dict of additional context.
        clock: Optional callable returning a :class:`~datetime.datetime`.
            Defaults to ``datetime.now(UTC)``.

    Returns:
        A frozen dataclass ready for serialisation.
    """
    resolved_map = DEFAULT_ERROR_TYPES if error_type_map is None else error_type_map
    error_type = resolved_map.get(type(error), "error")
    now = clock() if clock is not None else datetime.now(UTC)
    return ErrorPayload(
        error_type=error_type,
        message=str(error),
        timestamp=now.isoformat(),
        details=details or {},
    )
