"""Step window: value accumulated during the last complete reporting step.

Buckets are aligned to multiples of the step length since the epoch.  There
is exactly one open bucket; it rolls over lazily on the next add() or poll()
after its step has elapsed, never from a background timer.
"""

from monitor.clock import Clock


class StepWindow:
    __slots__ = ("step_ms", "_clock", "_bucket", "_current", "_previous")

    def __init__(self, clock: Clock, step_ms: int):
        self.step_ms = step_ms
        self._clock = clock
        self._bucket = clock.wall_time() // step_ms
        self._current = 0.0
        self._previous = 0.0

    def add(self, amount: float) -> None:
        """Accumulate into the open bucket, rolling over first if it expired."""
        self._roll()
        self._current += amount

    def poll(self) -> float:
        """Return what was accumulated in the most recently closed step."""
        self._roll()
        return self._previous

    def _roll(self) -> None:
        bucket = self._clock.wall_time() // self.step_ms
        if bucket <= self._bucket:
            return
        # Only the step right before now counts.  If steps were skipped,
        # the one that just closed saw no writes.
        self._previous = self._current if bucket == self._bucket + 1 else 0.0
        self._current = 0.0
        self._bucket = bucket
