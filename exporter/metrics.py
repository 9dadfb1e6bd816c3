"""Prometheus metrics for the access log monitor.

Mirrors the console's view (total rate, parse errors, per-route hits and
throughput, alert status) as gauges, so the same numbers can be scraped and
graphed.  Values are copied from a StatsSnapshot after each batch; nothing
here reads the live counters.
"""

from prometheus_client import Gauge, start_http_server

from monitor.engine import StatsSnapshot

# ---------------------------------------------------------------------------
# Traffic metrics
# ---------------------------------------------------------------------------
# Each Gauge below auto-registers itself in the global REGISTRY on
# construction; start_http_server() serves whatever that registry holds.
requests_per_second = Gauge(
    "accesslog_requests_per_second",
    "Total request rate over the last reporting step",
)
parse_errors = Gauge(
    "accesslog_parse_errors",
    "Log lines that could not be parsed",
)

# ---------------------------------------------------------------------------
# Route metrics
# ---------------------------------------------------------------------------
# Hits are exported as a gauge mirroring the monitor's own lifetime count,
# not incremented here.
route_hits = Gauge(
    "accesslog_route_hits",
    "Lifetime hits per route section",
    ["route"],
)
route_increase = Gauge(
    "accesslog_route_increase",
    "Hits per route section during the last reporting step",
    ["route"],
)
route_throughput = Gauge(
    "accesslog_route_throughput_bytes_per_second",
    "Bytes sent per second per route section over the last reporting step",
    ["route"],
)

# ---------------------------------------------------------------------------
# Alert metrics
# ---------------------------------------------------------------------------
alert_active = Gauge(
    "accesslog_alert_active",
    "1 while a high traffic alert is up, 0 otherwise",
)
alert_rate = Gauge(
    "accesslog_alert_rate",
    "Request rate recorded when the current alert fired (0 without alert)",
)
alert_fired_at = Gauge(
    "accesslog_alert_fired_at_seconds",
    "Epoch seconds of the current alert's first threshold crossing",
)


def update(snapshot: StatsSnapshot) -> None:
    """Copy a snapshot into the gauges."""
    requests_per_second.set(snapshot.total_rps)
    parse_errors.set(snapshot.parse_errors)

    for stats in snapshot.routes:
        route_hits.labels(route=stats.route).set(stats.hits)
        route_increase.labels(route=stats.route).set(stats.increase)
        route_throughput.labels(route=stats.route).set(stats.throughput)

    if snapshot.alert is None:
        alert_active.set(0)
        alert_rate.set(0)
        alert_fired_at.set(0)
    else:
        alert_active.set(1)
        alert_rate.set(snapshot.alert.rate)
        alert_fired_at.set(snapshot.alert.fired_at / 1000)


def start(port: int) -> None:
    """Serve /metrics from a daemon thread."""
    start_http_server(port)
