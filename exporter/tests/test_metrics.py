"""Tests for the Prometheus gauges."""

from prometheus_client import REGISTRY

from exporter import metrics
from monitor.alerting import Alert
from monitor.engine import StatsSnapshot
from monitor.routes import RouteSnapshot


def _value(name, **labels):
    return REGISTRY.get_sample_value(name, labels or None)


def _snapshot(alert=None):
    return StatsSnapshot(
        total_rps=4.2,
        parse_errors=3,
        routes=(RouteSnapshot("/api", 40, 5, 512.0), RouteSnapshot("/pages", 2, 0, 0.0)),
        alert=alert,
        logs=(),
    )


class TestUpdate:
    def test_traffic_gauges(self):
        metrics.update(_snapshot())
        assert _value("accesslog_requests_per_second") == 4.2
        assert _value("accesslog_parse_errors") == 3

    def test_route_gauges(self):
        metrics.update(_snapshot())
        assert _value("accesslog_route_hits", route="/api") == 40
        assert _value("accesslog_route_increase", route="/api") == 5
        assert _value("accesslog_route_throughput_bytes_per_second", route="/api") == 512.0
        assert _value("accesslog_route_hits", route="/pages") == 2

    def test_alert_gauges(self):
        metrics.update(_snapshot(alert=Alert(fired_at=30_000, rate=12.5)))
        assert _value("accesslog_alert_active") == 1
        assert _value("accesslog_alert_rate") == 12.5
        assert _value("accesslog_alert_fired_at_seconds") == 30

        metrics.update(_snapshot())
        assert _value("accesslog_alert_active") == 0
        assert _value("accesslog_alert_rate") == 0
