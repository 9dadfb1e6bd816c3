"""Screen layout for the operator console.

Pure functions from a StatsSnapshot to a list of text rows, so the layout
can be tested without a terminal.  The screen is split in two halves:

  top     total request rate, parse errors, the alert banner and the
          route table (route | hits | increase | throughput)
  bottom  the most recent raw log lines, oldest first

Column widths follow a naive grid: the width is divided into NUM_PARTS
parts, the route column takes two and every other column one.
"""

from datetime import datetime, tzinfo

from monitor.alerting import Alert
from monitor.engine import StatsSnapshot
from monitor.routes import RouteSnapshot

NUM_PARTS = 5
START_Y_TOTAL = 1
START_Y_STATS = START_Y_TOTAL + 3
HORIZONTAL_LINE = "═"

_ALERT_STYLE = "\x1b[1;5;33;44m"  # bold, blink, yellow on blue
_BOLD = "\x1b[1m"
_RESET = "\x1b[0m"


# ---------------------------------------------------------------------------
# Pane sizing: the driver sizes the log buffer and the route table from these
# ---------------------------------------------------------------------------

def log_capacity(rows: int) -> int:
    return max((rows >> 1) - 1, 0)


def stats_capacity(rows: int) -> int:
    return max((rows >> 1) - START_Y_STATS - 2, 0)


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------

def format_bandwidth(throughput: float) -> str:
    """Human readable bytes/sec, in steps of 1024."""
    n = 1024
    if throughput < n:
        return f"{round(throughput)} bps"
    if throughput < n ** 2:
        return f"{round(throughput / n)} KB/s"
    if throughput < n ** 3:
        return f"{round(throughput / n ** 2)} MB/s"
    return f"{round(throughput / n ** 3)} GB/s"


def format_alert(alert: Alert, tz: tzinfo | None = None) -> str:
    """Alert banner text.  *tz* defaults to the local timezone."""
    fired = datetime.fromtimestamp(alert.fired_at / 1000, tz)
    return (f"High traffic generated an alert: rps={alert.rate:.2f}, "
            f"triggered at {fired:%Y-%m-%d %H:%M:%S}")


def format_total(snapshot: StatsSnapshot) -> str:
    return (f"Http requests per second: {snapshot.total_rps:.2f} rps "
            f"(errors={snapshot.parse_errors})")


def _row_format(columns: int) -> tuple[int, int]:
    part = max((columns - 1) // NUM_PARTS, 1)
    return part << 1, part


def format_route_row(stats: RouteSnapshot, columns: int) -> str:
    route_w, cell_w = _row_format(columns)
    increase = "| -" if stats.increase == 0 else f"| +{stats.increase}"
    throughput = "| -" if stats.throughput == 0 else f"| {format_bandwidth(stats.throughput)}"
    return (f" {stats.route:<{route_w}}{f'| {stats.hits}':<{cell_w}}"
            f"{increase:<{cell_w}}{throughput:<{cell_w}}")


def format_route_header(columns: int) -> str:
    route_w, cell_w = _row_format(columns)
    return (f" {'route':<{route_w}}{'║ hits':<{cell_w}}"
            f"{'║ increase':<{cell_w}}{'║ throughput':<{cell_w}}")


# ---------------------------------------------------------------------------
# Whole screen
# ---------------------------------------------------------------------------

def render_screen(snapshot: StatsSnapshot, columns: int, rows: int,
                  color: bool = False, tz: tzinfo | None = None) -> list[str]:
    """Lay out *snapshot* as exactly *rows* lines of at most *columns* chars."""
    screen = [""] * rows
    half = rows >> 1

    def put(y, text):
        if 0 <= y < rows:
            screen[y] = text[:columns]

    total = " " + format_total(snapshot)
    if snapshot.alert is not None:
        banner = format_alert(snapshot.alert, tz)
        pad = max(columns - len(total) - len(banner), 1)
        put(START_Y_TOTAL, total + " " * pad + banner)
    else:
        put(START_Y_TOTAL, total)

    put(START_Y_STATS, format_route_header(columns))
    put(START_Y_STATS + 1, HORIZONTAL_LINE * columns)
    routes = snapshot.routes[:stats_capacity(rows)]
    for i, stats in enumerate(routes):
        put(START_Y_STATS + 2 + i, format_route_row(stats, columns))

    put(half, HORIZONTAL_LINE * columns)
    logs = snapshot.logs[-log_capacity(rows):] if log_capacity(rows) else ()
    for i, line in enumerate(logs):
        put(half + 1 + i, line)

    if color:
        _colorize(screen, snapshot, columns, tz)
    return screen


def _colorize(screen, snapshot, columns, tz):
    header = screen[START_Y_TOTAL]
    total_len = min(len(format_total(snapshot)) + 1, len(header))
    styled = _BOLD + header[:total_len] + _RESET
    if snapshot.alert is not None:
        banner_at = max(len(header) - len(format_alert(snapshot.alert, tz)), total_len)
        styled += header[total_len:banner_at] + _ALERT_STYLE + header[banner_at:] + _RESET
    else:
        styled += header[total_len:]
    screen[START_Y_TOTAL] = styled
    if len(screen) > START_Y_STATS:
        screen[START_Y_STATS] = _BOLD + screen[START_Y_STATS] + _RESET
