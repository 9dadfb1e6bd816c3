"""Tests for AlertEngine: trigger delay, cooldown, stale tentative alerts."""

from monitor.alerting import ALERT_FIRED, ALERT_RESOLVED, Alert, AlertEngine
from monitor.clock import MockClock

THRESHOLD = 10
TWO_MINUTES = 120_000


def _engine(clock, delay=TWO_MINUTES, cooldown=TWO_MINUTES):
    return AlertEngine(clock, threshold=THRESHOLD,
                       trigger_delay_ms=delay, cooldown_ms=cooldown)


def _tick(clock, engine, at_s, rate):
    clock.set(at_s * 1000)
    return engine.refresh(rate)


# ---------------------------------------------------------------------------
# Sustained high traffic: fires after the delay, clears after the cooldown
# ---------------------------------------------------------------------------

class TestSustainedTraffic:
    def setup_method(self):
        self.clock = MockClock()
        self.engine = _engine(self.clock)

    def test_no_alert_before_delay(self):
        for t in range(0, 120):
            assert _tick(self.clock, self.engine, t, 12) is None
        assert self.engine.current_alert() is None

    def test_fires_at_delay_with_original_crossing_time(self):
        for t in range(0, 120):
            _tick(self.clock, self.engine, t, 12)
        assert _tick(self.clock, self.engine, 120, 12) == ALERT_FIRED
        assert self.engine.current_alert() == Alert(fired_at=0, rate=12)

    def test_alert_held_through_cooldown_then_cleared(self):
        for t in range(0, 121):
            _tick(self.clock, self.engine, t, 12)
        for t in range(121, 240):
            assert _tick(self.clock, self.engine, t, 3) is None
            assert self.engine.current_alert() is not None
        assert _tick(self.clock, self.engine, 240, 3) == ALERT_RESOLVED
        assert self.engine.current_alert() is None
        assert self.engine.tentative_trigger_at is None
        assert self.engine.tentative_removal_at is None

    def test_rate_at_threshold_counts_as_high(self):
        _tick(self.clock, self.engine, 0, THRESHOLD)
        assert self.engine.tentative_trigger_at == 0

    def test_triggered_rate_is_a_snapshot(self):
        _tick(self.clock, self.engine, 0, 12)
        _tick(self.clock, self.engine, 120, 15)
        _tick(self.clock, self.engine, 130, 50)
        assert self.engine.current_alert().rate == 15

    def test_not_removed_while_traffic_stays_high(self):
        _tick(self.clock, self.engine, 0, 12)
        _tick(self.clock, self.engine, 120, 12)
        assert _tick(self.clock, self.engine, 300, 12) is None
        assert self.engine.current_alert() is not None
        # Cooldown long over: first low tick removes it.
        assert _tick(self.clock, self.engine, 301, 1) == ALERT_RESOLVED

    def test_cooldown_counts_from_trigger_tick(self):
        """Removal time is measured from when the alert fired, not from
        the first threshold crossing."""
        _tick(self.clock, self.engine, 0, 12)
        _tick(self.clock, self.engine, 150, 12)
        assert self.engine.tentative_removal_at == 270_000
        assert _tick(self.clock, self.engine, 269, 1) is None
        assert _tick(self.clock, self.engine, 270, 1) == ALERT_RESOLVED

    def test_can_fire_again_after_reset(self):
        _tick(self.clock, self.engine, 0, 12)
        _tick(self.clock, self.engine, 120, 12)
        _tick(self.clock, self.engine, 240, 1)
        _tick(self.clock, self.engine, 1000, 12)
        assert self.engine.current_alert() is None
        assert _tick(self.clock, self.engine, 1120, 12) == ALERT_FIRED
        assert self.engine.current_alert().fired_at == 1_000_000


# ---------------------------------------------------------------------------
# Flapping traffic: a tentative alert is never reset by low traffic
# ---------------------------------------------------------------------------

class TestFlapping:
    def setup_method(self):
        self.clock = MockClock()
        self.engine = _engine(self.clock)

    def test_low_traffic_keeps_stale_tentative_alert(self):
        _tick(self.clock, self.engine, 0, 10)
        _tick(self.clock, self.engine, 10, 5)
        assert self.engine.tentative_trigger_at == 0
        assert self.engine.current_alert() is None

    def test_stale_tentative_alert_fires_immediately(self):
        _tick(self.clock, self.engine, 0, 10)
        _tick(self.clock, self.engine, 10, 5)
        assert _tick(self.clock, self.engine, 500, 10) == ALERT_FIRED
        assert self.engine.current_alert() == Alert(fired_at=0, rate=10)


class TestIdle:
    def test_low_traffic_does_nothing(self):
        clock = MockClock()
        engine = _engine(clock)
        for t in range(0, 600, 10):
            assert _tick(clock, engine, t, 9.99) is None
        assert engine.tentative_trigger_at is None
        assert engine.current_alert() is None

    def test_zero_delay_fires_on_second_tick(self):
        clock = MockClock()
        engine = _engine(clock, delay=0)
        assert engine.refresh(12) is None
        assert engine.refresh(12) == ALERT_FIRED
