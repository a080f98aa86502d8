"""Pytest plugin providing shared clock fixtures for monotick.

Auto-registers ``fake_clock``, ``fake_wall_clock`` and ``fake_sleeper``
for any test suite that depends on monotick, via the ``pytest11`` entry
point.

Imports of monotick modules are deferred into the fixture bodies so
that they happen after ``pytest-cov`` starts tracing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from monotick.testing._clock import FakeClock, FakeSleeper, FakeWallClock


@pytest.fixture
def fake_clock() -> FakeClock:
    """FakeClock starting at time 0."""
    from monotick.testing._clock import FakeClock

    return FakeClock()


@pytest.fixture
def fake_wall_clock() -> FakeWallClock:
    """FakeWallClock starting at 2026-01-01T00:00:00Z."""
    from monotick.testing._clock import FakeWallClock

    return FakeWallClock()


@pytest.fixture
def fake_sleeper(fake_clock: FakeClock, fake_wall_clock: FakeWallClock) -> FakeSleeper:
    """FakeSleeper driving the ``fake_clock`` and ``fake_wall_clock`` fixtures."""
    from monotick.testing._clock import FakeSleeper

    return FakeSleeper(clock=fake_clock, wall_clock=fake_wall_clock)
