"""Monitor configuration: defaults, optional YAML file, validation.

A config file holds any subset of the Config fields, e.g.

    log_path: /var/log/nginx/access.log
    log_format: ingress_nginx
    route_depth: 2
    alert_threshold: 25
    alert_delay_s: 60

Command line flags override the file.  Everything is validated here, once,
before the statistics engine is built; the engine itself assumes sane values.
"""

from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from monitor.clock import SECOND_MS
from monitor.formats import get_format


@dataclass(frozen=True)
class Config:
    log_path: str = "/tmp/access.log"
    log_format: str = "clf"
    refresh_period_ms: int = 250
    route_depth: int = 1
    alert_threshold: float = 10       # total requests/sec
    alert_delay_s: int = 120          # over threshold this long before alerting
    alert_cooldown_s: int = 120       # minimum time an alert stays up
    step_s: float = 10                # reporting step for rates and increases
    from_end: bool = False            # skip what's already in the file
    metrics_port: int | None = None
    bootstrap_servers: str | None = None
    alerts_topic: str = "access-log-alerts"

    @property
    def step_ms(self) -> int:
        return int(self.step_s * SECOND_MS)

    @property
    def alert_delay_ms(self) -> int:
        return int(self.alert_delay_s * SECOND_MS)

    @property
    def alert_cooldown_ms(self) -> int:
        return int(self.alert_cooldown_s * SECOND_MS)

    def merged(self, **overrides) -> "Config":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> "Config":
        if isinstance(self.route_depth, bool) or not isinstance(self.route_depth, int):
            raise ValueError(f"route_depth must be an integer, got {self.route_depth!r}")
        if self.route_depth < 1:
            raise ValueError(f"route_depth must be >= 1, got {self.route_depth}")
        if self.alert_threshold <= 0:
            raise ValueError(f"alert_threshold must be positive, got {self.alert_threshold}")
        if self.alert_delay_s < 0:
            raise ValueError(f"alert_delay_s must be non-negative, got {self.alert_delay_s}")
        if self.alert_cooldown_s < 0:
            raise ValueError(f"alert_cooldown_s must be non-negative, got {self.alert_cooldown_s}")
        if self.step_ms <= 0:
            raise ValueError(f"step_s must be positive, got {self.step_s}")
        if self.refresh_period_ms <= 0:
            raise ValueError(f"refresh_period_ms must be positive, got {self.refresh_period_ms}")
        if self.metrics_port is not None and not 0 < self.metrics_port < 65536:
            raise ValueError(f"metrics_port out of range: {self.metrics_port}")
        get_format(self.log_format)
        return self


_FIELDS = {f.name for f in fields(Config)}

_TYPES = {
    "log_path": (str,),
    "log_format": (str,),
    "refresh_period_ms": (int,),
    "route_depth": (int,),
    "alert_threshold": (int, float),
    "alert_delay_s": (int, float),
    "alert_cooldown_s": (int, float),
    "step_s": (int, float),
    "from_end": (bool,),
    "metrics_port": (int, type(None)),
    "bootstrap_servers": (str, type(None)),
    "alerts_topic": (str,),
}


def load_config(path: str | Path, base: Config | None = None) -> Config:
    """Read a YAML config file on top of *base* (defaults if omitted)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    values = _parse_and_validate(path)
    return replace(base or Config(), **values).validate()


def _parse_and_validate(path: Path) -> dict:
    try:
        with open(path) as f:
            definition = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"{path.name}: invalid YAML: {e}") from e

    if definition is None:
        return {}
    if not isinstance(definition, dict):
        raise ValueError(f"{path.name}: expected a mapping at top level")

    for key, value in definition.items():
        if key not in _FIELDS:
            raise ValueError(f"{path.name}: unknown config key '{key}'")
        expected = _TYPES[key]
        # bool is an int subclass; only from_end takes one
        if isinstance(value, bool) and bool not in expected:
            raise ValueError(f"{path.name}: '{key}' must not be a boolean, got {value!r}")
        if not isinstance(value, expected):
            names = " or ".join(t.__name__ for t in expected)
            raise ValueError(f"{path.name}: '{key}' must be {names}, got {value!r}")

    return definition
