"""Lifetime counter paired with a per-step rate view."""

from monitor.clock import SECOND_MS, Clock
from monitor.step_window import StepWindow


class RollingCounter:
    """Monotonic total plus the delta/rate of the last complete step.

    The rate is the one implied by the last step alone, not a decaying
    average over the counter's lifetime.
    """

    __slots__ = ("_total", "_window")

    def __init__(self, clock: Clock, step_ms: int):
        self._total = 0.0
        self._window = StepWindow(clock, step_ms)

    def increment(self, amount: float = 1.0) -> None:
        self._total += amount
        self._window.add(amount)

    def count(self) -> float:
        return self._total

    def increase(self) -> float:
        """Amount added during the last complete step."""
        return self._window.poll()

    def mean(self, unit_ms: int = SECOND_MS) -> float:
        """Rate per *unit_ms* over the last complete step."""
        return self._window.poll() / (self._window.step_ms / unit_ms)
