"""Integration tests — real clocks end to end.

Runs the public API and the CLI against the host's real monotonic and
wall clocks, with real sleeps kept short.

Test Techniques Used:
    - Integration Testing: measure_delay / Stopwatch / CLI with system
      clocks and ``time.sleep``.
    - Property Check: successive monotonic readings never decrease.
"""

from __future__ import annotations

import json
import time

import pytest
from typer.testing import CliRunner

from monotick import (
    MILLISECOND,
    Duration,
    Stopwatch,
    SystemClock,
    Timestamp,
    measure_many,
    summarise,
)
from monotick._cli import EXIT_OK, build_cli
from monotick.testing import make_settings

pytestmark = pytest.mark.integration


class TestRealClocks:
    """The read-wait-read-subtract pattern on real hardware clocks."""

    def test_elapsed_covers_requested_delay(self) -> None:
        measurements = measure_many("20ms", 3)
        summary = summarise(measurements)

        assert summary.count == 3
        # time.sleep may wake marginally early on some platforms
        assert summary.minimum >= Duration.of(15, MILLISECOND)
        for m in measurements:
            assert m.end > m.start

    def test_read_jitter_is_not_reported_as_skew(self) -> None:
        # the two clocks are read a few hundred ns apart, so skew is rarely exactly zero
        summary = summarise(measure_many("2ms", 20))
        assert summary.skew_observed is False

    def test_successive_readings_never_decrease(self) -> None:
        readings = [Timestamp.capture() for _ in range(1_000)]
        for earlier, later in zip(readings, readings[1:]):
            assert later - earlier >= Duration()

    def test_stopwatch_times_a_block(self) -> None:
        with Stopwatch(SystemClock()) as sw:
            time.sleep(0.01)
        assert sw.elapsed() >= Duration.of(5, MILLISECOND)


@pytest.mark.usefixtures("_restore_root_logger")
class TestCliEndToEnd:
    """CLI with real clocks and isolated settings."""

    def test_measure_json(self) -> None:
        cli = build_cli(settings_factory=lambda _env_file: make_settings())

        result = CliRunner().invoke(cli, ["measure", "-d", "10ms", "-n", "2", "--json"])

        assert result.exit_code == EXIT_OK
        data = json.loads(result.output.strip().splitlines()[-1])
        assert data["summary"]["count"] == 2
        assert data["summary"]["min_ns"] > 0
        assert data["summary"]["skew_observed"] is False

    def test_measure_text_has_no_skew_notice(self) -> None:
        cli = build_cli(settings_factory=lambda _env_file: make_settings())

        result = CliRunner().invoke(cli, ["measure", "-d", "5ms", "-n", "3"])

        assert result.exit_code == EXIT_OK
        assert "disagrees" not in result.output

    def test_now(self) -> None:
        cli = build_cli(settings_factory=lambda _env_file: make_settings())

        result = CliRunner().invoke(cli, ["now", "--json"])

        assert result.exit_code == EXIT_OK
        data = json.loads(result.output.strip().splitlines()[-1])
        assert data["wall"].endswith("Z")
        assert isinstance(data["monotonic_ns"], int)
