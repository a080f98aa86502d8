"""Command-line interface (Typer-based).

Provides :func:`build_cli`, which constructs the ``monotick`` Typer app.
Global options (``--version``, ``--log-level``, ``--log-format``,
``--env-file``) are handled by the group callback, which loads
settings and configures logging before any subcommand runs:

- ``now`` — capture and print a wall + monotonic timestamp.
- ``measure`` — read, wait, read, subtract; optionally repeated.
- ``convert`` — re-express a duration string in another unit.
- ``utc`` — normalise an RFC 3339 timestamp to UTC.

Clocks, the sleep function and the settings loader are injectable so
tests can drive the CLI deterministically.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Annotated, get_args

import typer
from pydantic import ValidationError

from monotick._clock import ClockPort, WallClockPort
from monotick._errors import (
    LeapSecondError,
    MonotickError,
    build_error_payload,
)
from monotick._logging import configure_logging
from monotick._measure import DEFAULT_SKEW_TOLERANCE, SleepFunc, measure_many, summarise
from monotick._settings import LoggingSettings, Settings
from monotick._timestamp import Timestamp
from monotick._units import UNIT_NAMES, ZERO, Duration, coerce_duration, parse_duration
from monotick._utc import format_utc, parse_utc, utc_offset_of

logger = logging.getLogger(__name__)

SERVICE_NAME = "monotick"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_RUNTIME_ERROR = 3

# ---------------------------------------------------------------------------
# Allowed values (extracted from LoggingSettings Literal types)
# ---------------------------------------------------------------------------

_VALID_LOG_LEVELS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["level"].annotation,
)
_VALID_LOG_FORMATS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["format"].annotation,
)

SettingsFactory = Callable[[str], Settings]


def _load_settings(env_file: str) -> Settings:
    return Settings(_env_file=env_file)  # type: ignore[call-arg]


def _package_version() -> str:
    from monotick import __version__

    return __version__


@dataclass
class _CliState:
    settings: Settings


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return f"{value:.9g}"


def _format_in(duration: Duration, unit: str) -> str:
    return f"{_format_number(duration.in_units(UNIT_NAMES[unit]))}{unit}"


def _format_offset(offset_seconds: float) -> str:
    sign = "+" if offset_seconds >= 0 else "-"
    minutes = int(abs(offset_seconds)) // 60
    return f"UTC{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _validate_unit(unit: str, param_hint: str) -> str:
    if unit not in UNIT_NAMES:
        raise typer.BadParameter(
            f"Invalid unit '{unit}'. Choose from: {', '.join(UNIT_NAMES)}",
            param_hint=param_hint,
        )
    return unit


def _fail(error: MonotickError, *, as_json: bool, hint: str | None = None) -> typer.Exit:
    """Report *error* on stderr and return the exit to raise."""
    logger.debug("Command failed", exc_info=error)
    if as_json:
        details = {"hint": hint} if hint else None
        typer.echo(build_error_payload(error, details=details).to_json(), err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
        if hint:
            typer.echo(hint, err=True)
    return typer.Exit(code=EXIT_RUNTIME_ERROR)


# ---------------------------------------------------------------------------
# CLI factory
# ---------------------------------------------------------------------------


def build_cli(
    *,
    clock: ClockPort | None = None,
    wall_clock: WallClockPort | None = None,
    sleep: SleepFunc = time.sleep,
    settings_factory: SettingsFactory = _load_settings,
) -> typer.Typer:
    """Construct the ``monotick`` Typer app.

    Args:
        clock: Monotonic clock for all commands.  Defaults to the
            system clock.
        wall_clock: Wall clock for all commands.  Defaults to the
            system UTC clock.
        sleep: Blocking wait used by ``measure``.
        settings_factory: Called with the ``--env-file`` path to load
            :class:`Settings`.

    Returns:
        A configured :class:`typer.Typer` ready to invoke.
    """
    cli = typer.Typer(
        help="Monotonic clocks, time units and UTC, demonstrated.",
        no_args_is_help=True,
    )

    # -- global options -----------------------------------------------------

    @cli.callback(invoke_without_command=True)
    def main(
        ctx: typer.Context,
        version_flag: Annotated[
            bool | None,
            typer.Option(
                "--version",
                is_eager=True,
                help="Show version and exit.",
            ),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Override log level."),
        ] = None,
        log_format: Annotated[
            str | None,
            typer.Option("--log-format", help="Override log format."),
        ] = None,
        env_file: Annotated[
            str,
            typer.Option("--env-file", help="Path to .env file."),
        ] = ".env",
    ) -> None:
        if version_flag:
            typer.echo(f"{SERVICE_NAME} v{_package_version()}")
            raise typer.Exit()

        if log_level is not None and log_level.upper() not in _VALID_LOG_LEVELS:
            raise typer.BadParameter(
                f"Invalid log level '{log_level}'. "
                f"Choose from: {', '.join(_VALID_LOG_LEVELS)}",
                param_hint="'--log-level'",
            )

        if log_format is not None and log_format.lower() not in _VALID_LOG_FORMATS:
            raise typer.BadParameter(
                f"Invalid log format '{log_format}'. "
                f"Choose from: {', '.join(_VALID_LOG_FORMATS)}",
                param_hint="'--log-format'",
            )

        try:
            settings = settings_factory(env_file)
        except ValidationError as exc:
            typer.echo(f"Configuration error: {exc}", err=True)
            raise typer.Exit(code=EXIT_CONFIG_ERROR) from exc

        if log_level is not None:
            settings.logging = settings.logging.model_copy(
                update={"level": log_level.upper()},
            )

        if log_format is not None:
            settings.logging = settings.logging.model_copy(
                update={"format": log_format.lower()},
            )

        configure_logging(
            settings.logging,
            service=SERVICE_NAME,
            version=_package_version(),
        )

        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit()

        ctx.obj = _CliState(settings=settings)

    # -- now ----------------------------------------------------------------

    @cli.command()
    def now(
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Emit JSON instead of text."),
        ] = False,
    ) -> None:
        """Capture the current wall-clock and monotonic readings."""
        ts = Timestamp.capture(clock, wall_clock)
        local = ts.wall.astimezone()
        offset = _format_offset(utc_offset_of(local).total_seconds())

        if json_output:
            payload = ts.to_dict()
            payload["local"] = local.isoformat()
            typer.echo(json.dumps(payload))
            return

        typer.echo(f"UTC:        {format_utc(ts.wall)}")
        typer.echo(f"Local:      {local.isoformat()} ({offset})")
        typer.echo(
            f"Monotonic:  {ts.monotonic_ns}ns "
            "(arbitrary epoch; only differences are meaningful)"
        )

    # -- measure ------------------------------------------------------------

    @cli.command()
    def measure(
        ctx: typer.Context,
        delay: Annotated[
            str | None,
            typer.Option(
                "--delay",
                "-d",
                help="Wait between readings, e.g. '250ms' or '1.5' (seconds).",
            ),
        ] = None,
        count: Annotated[
            int | None,
            typer.Option("--count", "-n", min=1, help="Number of cycles."),
        ] = None,
        unit: Annotated[
            str | None,
            typer.Option("--unit", "-u", help="Output unit (ns, us, ms, s, m, h)."),
        ] = None,
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Emit JSON instead of text."),
        ] = False,
    ) -> None:
        """Read the clock, wait, read it again and print the difference."""
        state: _CliState = ctx.obj
        defaults = state.settings.measure

        out_unit = _validate_unit(unit if unit is not None else defaults.unit, "'--unit'")
        try:
            requested = coerce_duration(
                _parse_delay(delay) if delay is not None else defaults.delay
            )
        except MonotickError as exc:
            raise typer.BadParameter(str(exc), param_hint="'--delay'") from exc
        if requested < ZERO:
            raise typer.BadParameter(
                f"delay must not be negative, got {requested}",
                param_hint="'--delay'",
            )

        cycles = count if count is not None else defaults.count
        try:
            measurements = measure_many(
                requested,
                cycles,
                clock=clock,
                wall_clock=wall_clock,
                sleep=sleep,
            )
        except MonotickError as exc:
            raise _fail(exc, as_json=json_output) from exc

        summary = summarise(measurements)

        if json_output:
            typer.echo(
                json.dumps(
                    {
                        "measurements": [m.to_dict() for m in measurements],
                        "summary": summary.to_dict(),
                    }
                )
            )
            return

        for index, m in enumerate(measurements, start=1):
            typer.echo(
                f"#{index}: elapsed {_format_in(m.elapsed, out_unit)} "
                f"(requested {m.requested}, wall {_format_in(m.wall_elapsed, out_unit)})"
            )
            if abs(m.skew) > DEFAULT_SKEW_TOLERANCE:
                typer.echo(
                    f"    wall clock disagrees by {m.skew}; "
                    "the monotonic reading is the one to trust"
                )

        if summary.count > 1:
            typer.echo(
                f"min {_format_in(summary.minimum, out_unit)}  "
                f"max {_format_in(summary.maximum, out_unit)}  "
                f"mean {_format_in(summary.mean, out_unit)}  "
                f"total {_format_in(summary.total, out_unit)}"
            )

    # -- convert ------------------------------------------------------------

    @cli.command()
    def convert(
        value: Annotated[str, typer.Argument(help="Duration such as '1h30m' or '250ms'.")],
        to: Annotated[
            str,
            typer.Option("--to", "-t", help="Target unit (ns, us, ms, s, m, h)."),
        ] = "s",
    ) -> None:
        """Express a duration in another unit."""
        target = _validate_unit(to, "'--to'")
        try:
            duration = parse_duration(value)
        except MonotickError as exc:
            raise typer.BadParameter(str(exc), param_hint="'VALUE'") from exc
        typer.echo(_format_in(duration, target))

    # -- utc ----------------------------------------------------------------

    @cli.command()
    def utc(
        text: Annotated[str, typer.Argument(help="RFC 3339 timestamp with an offset.")],
        json_output: Annotated[
            bool,
            typer.Option("--json", help="Emit JSON instead of text."),
        ] = False,
    ) -> None:
        """Normalise a timestamp to UTC."""
        try:
            parsed = parse_utc(text)
        except LeapSecondError as exc:
            hint = (
                "UTC occasionally inserts a leap second (23:59:60) to stay in step "
                "with Earth's rotation. Most software, Python included, cannot "
                "represent it; systems usually repeat or smear the previous second."
            )
            raise _fail(exc, as_json=json_output, hint=hint) from exc
        except MonotickError as exc:
            raise _fail(exc, as_json=json_output) from exc
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="'TEXT'") from exc

        if json_output:
            typer.echo(json.dumps({"utc": format_utc(parsed)}))
            return
        typer.echo(format_utc(parsed))

    return cli


def _parse_delay(text: str) -> Duration:
    """Parse ``--delay``: plain numbers are seconds, anything else a duration."""
    try:
        seconds = float(text)
    except ValueError:
        return parse_duration(text)
    return coerce_duration(seconds)


def main() -> None:
    """Console-script entry point."""
    build_cli()()
