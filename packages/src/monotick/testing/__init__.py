"""Public test-support utilities for monotick.

Provided symbols:

- :class:`FakeClock` — deterministic monotonic clock.
- :class:`FakeWallClock` — deterministic, steppable wall clock.
- :class:`FakeSleeper` — ``time.sleep`` replacement driving the fakes.
- :func:`make_settings` — factory for ``Settings`` without ``.env`` files.
"""

from monotick.testing._clock import FakeClock, FakeSleeper, FakeWallClock
from monotick.testing._settings import make_settings

__all__ = [
    "FakeClock",
    "FakeSleeper",
    "FakeWallClock",
    "make_settings",
]
