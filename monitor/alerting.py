"""High traffic alerting with a trigger delay and a removal cooldown.

States:
  idle       nothing recorded
  tentative  rate crossed the threshold at tentative_trigger_at
  triggered  rate stayed over the threshold for the trigger delay; the alert
             is reported as fired at tentative_trigger_at and cannot be
             removed before tentative_removal_at

A tentative alert is never reset while the rate is below the threshold.  If
traffic crosses the threshold again later, the delay is measured from the
original crossing and the alert may fire straight away.
"""

from dataclasses import dataclass

from monitor.clock import Clock

ALERT_FIRED = "alert_fired"
ALERT_RESOLVED = "alert_resolved"


@dataclass(frozen=True)
class Alert:
    fired_at: int  # epoch millis
    rate: float


class AlertEngine:

    def __init__(self, clock: Clock, threshold: float,
                 trigger_delay_ms: int, cooldown_ms: int):
        self.threshold = threshold
        self.trigger_delay_ms = trigger_delay_ms
        self.cooldown_ms = cooldown_ms
        self._clock = clock
        self._reset()

    def refresh(self, rate: float) -> str | None:
        """Re-evaluate the alert state against the current aggregate *rate*.

        Returns ALERT_FIRED or ALERT_RESOLVED when the alert changes
        visibility, None otherwise.
        """
        now = self._clock.wall_time()
        if rate >= self.threshold:
            if self.tentative_trigger_at is None:
                self.tentative_trigger_at = now
            elif not self.triggering and \
                    now >= self.tentative_trigger_at + self.trigger_delay_ms:
                self.triggered_at = self.tentative_trigger_at
                self.triggered_rate = rate
                self.tentative_removal_at = now + self.cooldown_ms
                return ALERT_FIRED
        elif self.triggering and now >= self.tentative_removal_at:
            self._reset()
            return ALERT_RESOLVED
        return None

    @property
    def triggering(self) -> bool:
        return self.triggered_at is not None

    def current_alert(self) -> Alert | None:
        if not self.triggering:
            return None
        return Alert(fired_at=self.triggered_at, rate=self.triggered_rate)

    def _reset(self) -> None:
        self.tentative_trigger_at: int | None = None
        self.tentative_removal_at: int | None = None
        self.triggered_at: int | None = None
        self.triggered_rate = 0.0
