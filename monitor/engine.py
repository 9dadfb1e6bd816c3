"""Log statistics: ingests raw access log lines and owns all live state.

Pure business logic, no file or terminal dependency.  The driver feeds
batches of lines in; the console and exporters read StatsSnapshot values
back out and never touch the counters themselves.

State:
  total requests  RollingCounter over every line, parsed or not
  parse errors    lines the log format rejected
  routes          RouteAggregator keyed by route section
  alerting        AlertEngine fed with the total request rate
  log buffer      BoundedLogBuffer of the most recent raw lines
"""

from dataclasses import dataclass

from monitor.alerting import Alert, AlertEngine
from monitor.clock import SECOND_MS, Clock, SystemClock
from monitor.config import Config
from monitor.formats import LogEvent, LogFormat, get_format
from monitor.log_buffer import BoundedLogBuffer
from monitor.rolling_counter import RollingCounter
from monitor.routes import RouteAggregator, RouteSnapshot, route_section


@dataclass(frozen=True)
class StatsSnapshot:
    total_rps: float
    parse_errors: int
    routes: tuple[RouteSnapshot, ...]
    alert: Alert | None
    logs: tuple[str, ...]


class LogStatistics:

    def __init__(self, cfg: Config | None = None, clock: Clock | None = None,
                 log_format: LogFormat | None = None):
        self.cfg = cfg or Config()
        self.clock = clock or SystemClock()
        self.log_format = log_format or get_format(self.cfg.log_format)

        step_ms = self.cfg.step_ms
        self.total_requests = RollingCounter(self.clock, step_ms)
        self.parse_errors = 0
        self.routes = RouteAggregator(self.clock, step_ms)
        self.alerting = AlertEngine(
            self.clock,
            threshold=self.cfg.alert_threshold,
            trigger_delay_ms=self.cfg.alert_delay_ms,
            cooldown_ms=self.cfg.alert_cooldown_ms,
        )
        self.log_buffer = BoundedLogBuffer()

    def process_lines(self, lines) -> list[dict]:
        """Ingest a batch of raw lines, then re-evaluate the alert once.

        Returns the alert transitions caused by this batch (zero or one),
        as dicts ready to be published.
        """
        for line in lines:
            line = line.rstrip("\r\n")
            event = self.log_format.parse(line)
            if event is None:
                self.inc_requests()
            else:
                self.ingest(event)
            self.log_buffer.append(line)
        return self.refresh_alert()

    def ingest(self, event: LogEvent) -> None:
        self.total_requests.increment()
        section = route_section(event.route, self.cfg.route_depth)
        self.routes.ingest(section, event.bytes_sent)

    def inc_requests(self) -> None:
        """An unparseable line is still a request: count it, attribute it
        to no route."""
        self.total_requests.increment()
        self.parse_errors += 1

    def refresh_alert(self) -> list[dict]:
        rate = self.total_rps()
        transition = self.alerting.refresh(rate)
        if transition is None:
            return []
        alert = {
            "type": transition,
            "timestamp": self.clock.wall_time(),
            "rate": round(rate, 2),
            "threshold": self.cfg.alert_threshold,
        }
        current = self.alerting.current_alert()
        if current is not None:
            alert["fired_at"] = current.fired_at
            alert["alert_rate"] = round(current.rate, 2)
        return [alert]

    def total_rps(self) -> float:
        return self.total_requests.mean(SECOND_MS)

    def current_alert(self) -> Alert | None:
        return self.alerting.current_alert()

    def route_statistics(self, limit: int) -> tuple[RouteSnapshot, ...]:
        return self.routes.top(limit)

    def logs(self) -> tuple[str, ...]:
        return tuple(self.log_buffer)

    def snapshot(self, limit: int) -> StatsSnapshot:
        return StatsSnapshot(
            total_rps=self.total_rps(),
            parse_errors=self.parse_errors,
            routes=self.route_statistics(limit),
            alert=self.current_alert(),
            logs=self.logs(),
        )
