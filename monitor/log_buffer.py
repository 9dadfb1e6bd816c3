"""Bounded buffer of raw log lines for the scrolling log pane."""

from collections import deque

DEFAULT_CAPACITY = 10


class BoundedLogBuffer:
    """FIFO of lines; once full, each append evicts the oldest line.

    Not thread safe: only the ingestion loop appends.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        self._lines: deque[str] = deque(maxlen=max(capacity, 0))

    @property
    def capacity(self) -> int:
        return self._lines.maxlen

    def append(self, line: str) -> None:
        self._lines.append(line)

    def resize(self, capacity: int) -> None:
        """Change the bound.  Lines beyond the new capacity are dropped now,
        oldest first, rather than on later appends."""
        capacity = max(capacity, 0)
        if capacity != self._lines.maxlen:
            self._lines = deque(self._lines, maxlen=capacity)

    def __iter__(self):
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
