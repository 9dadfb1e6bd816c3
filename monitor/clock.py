"""Wall clocks in epoch milliseconds.

Every time-dependent piece of the monitor (step windows, alerting) reads
time through one of these, never through time.time() directly, so tests
can drive time with a MockClock.
"""

import time

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS


class Clock:
    """Source of the current wall time in milliseconds."""

    def wall_time(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):

    def wall_time(self) -> int:
        return int(time.time() * SECOND_MS)


class MockClock(Clock):
    """Manually advanced clock. Starts at epoch 0 unless told otherwise."""

    def __init__(self, start_ms: int = 0):
        self._now = start_ms

    def wall_time(self) -> int:
        return self._now

    def add(self, seconds: float = 0, millis: int = 0) -> int:
        self._now += int(seconds * SECOND_MS) + millis
        return self._now

    def set(self, millis: int) -> None:
        self._now = millis
