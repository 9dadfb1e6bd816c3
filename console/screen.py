"""Full-screen terminal drawing with plain ANSI escapes.

Draws into the alternate screen buffer so the shell scrollback is left
untouched, and restores the terminal on close.  Redraws are throttled to
one per refresh period unless the terminal was resized.

When stdin is a terminal it is put in cbreak mode for the lifetime of the
screen so a single Escape key press can be picked up without Enter.
"""

import os
import select
import shutil
import sys
import termios
import time
import tty

from console.render import log_capacity, render_screen, stats_capacity

_ENTER = "\x1b[?1049h\x1b[?25l"   # alternate buffer, hide cursor
_LEAVE = "\x1b[?25h\x1b[?1049l"
_HOME_CLEAR = "\x1b[H\x1b[2J"

ESC = "\x1b"
# CSI and SS3 introducers: ESC followed by one of these is a key sequence
# (arrows, function keys), not a lone Escape press.
_SEQUENCE_STARTS = ("[", "O")


class ConsoleScreen:

    def __init__(self, refresh_period_ms: int, stream=None, size_fn=None, key_fn=None):
        self.refresh_period = refresh_period_ms / 1000
        self._stream = stream or sys.stdout
        self._size_fn = size_fn or shutil.get_terminal_size
        self._key_fn = key_fn or self._read_key
        self._stdin = None if key_fn else sys.stdin
        self._saved_tty = None
        self.columns, self.rows = self._size_fn()
        self._last_refresh = 0.0

    def __enter__(self):
        self._enter_cbreak()
        self._stream.write(_ENTER)
        self._stream.flush()
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self) -> None:
        self._stream.write(_LEAVE)
        self._stream.flush()
        if self._saved_tty is not None:
            termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._saved_tty)
            self._saved_tty = None

    def _enter_cbreak(self) -> None:
        if self._stdin is None or not self._stdin.isatty():
            return
        fd = self._stdin.fileno()
        self._saved_tty = termios.tcgetattr(fd)
        tty.setcbreak(fd)

    def _read_key(self) -> str | None:
        """One pending input character, or None without blocking."""
        if self._saved_tty is None:
            return None
        ready, _, _ = select.select([self._stdin], [], [], 0)
        if not ready:
            return None
        data = os.read(self._stdin.fileno(), 1)
        return data.decode(errors="replace") if data else None

    @property
    def log_capacity(self) -> int:
        return log_capacity(self.rows)

    @property
    def stats_capacity(self) -> int:
        return stats_capacity(self.rows)

    def should_exit(self) -> bool:
        """Drain pending key presses; True if one of them was a bare Escape."""
        pending = []
        key = self._key_fn()
        while key is not None:
            pending.append(key)
            key = self._key_fn()

        for i, key in enumerate(pending):
            if key != ESC:
                continue
            following = pending[i + 1] if i + 1 < len(pending) else None
            if following not in _SEQUENCE_STARTS:
                return True
        return False

    def resized(self) -> bool:
        """Pick up a new terminal size, if any."""
        size = tuple(self._size_fn())
        if size == (self.columns, self.rows):
            return False
        self.columns, self.rows = size
        return True

    def refresh(self, snapshot, force: bool = False) -> bool:
        """Redraw if forced or the refresh period elapsed.  Returns True if drawn."""
        now = time.monotonic()
        if not force and now - self._last_refresh < self.refresh_period:
            return False
        lines = render_screen(snapshot, self.columns, self.rows, color=True)
        self._stream.write(_HOME_CLEAR + "\n".join(lines))
        self._stream.flush()
        self._last_refresh = now
        return True
