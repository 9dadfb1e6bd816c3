"""Access log monitor: follows an HTTP access log and shows live statistics.

Reads new lines from the log in batches, feeds them to LogStatistics, and
redraws the console.  Optionally exports Prometheus metrics and publishes
alert transitions to Kafka.

Usage:
    python -m monitor.main /var/log/nginx/access.log
    python -m monitor.main access.log --format ingress_nginx --route-depth 2
    python -m monitor.main --config monitor.yml --metrics-port 9100
    python -m monitor.main access.log --bootstrap-servers localhost:9092
"""

import argparse
import os
import signal
import sys
import time

from console.screen import ConsoleScreen
from monitor.config import Config, load_config
from monitor.engine import LogStatistics

running = True


def _shutdown(sig, frame):
    global running
    running = False


def read_lines(log_file, n: int) -> list[str]:
    """Read up to *n* complete lines.

    A trailing line without a newline is still being written: rewind to its
    start and leave it for the next call.
    """
    lines = []
    for _ in range(n):
        pos = log_file.tell()
        line = log_file.readline()
        if not line:
            break
        if not line.endswith("\n"):
            log_file.seek(pos)
            break
        lines.append(line)
    return lines


def build_config(args) -> Config:
    cfg = load_config(args.config) if args.config else Config()
    return cfg.merged(
        log_path=args.log_path,
        log_format=args.format,
        refresh_period_ms=args.ui_refresh,
        route_depth=args.route_depth,
        alert_threshold=args.alert_threshold,
        alert_delay_s=args.alert_delay,
        alert_cooldown_s=args.alert_cooldown,
        step_s=args.step,
        from_end=args.from_end,
        metrics_port=args.metrics_port,
        bootstrap_servers=args.bootstrap_servers,
        alerts_topic=args.alerts_topic,
    ).validate()


def parse_args(argv=None):
    # Every default is None so that unset flags don't override the config file.
    parser = argparse.ArgumentParser(
        description="Follows an HTTP log file and gathers useful metrics "
                    "from the incoming requests",
    )
    parser.add_argument("log_path", nargs="?", metavar="LOG_PATH",
                        help="HTTP access log to follow (default: /tmp/access.log)")
    parser.add_argument("-c", "--config", help="YAML config file")
    parser.add_argument("-f", "--format", help="log format: clf or ingress_nginx (default: clf)")
    parser.add_argument("--ui-refresh", type=int,
                        help="UI refresh period in milliseconds (default: 250)")
    parser.add_argument("-d", "--route-depth", type=int,
                        help="depth at which routes are truncated into sections (default: 1)")
    parser.add_argument("-a", "--alert-threshold", type=float,
                        help="total requests/sec at which an alert is raised (default: 10)")
    parser.add_argument("--alert-delay", type=int,
                        help="seconds over the threshold before the alert fires (default: 120)")
    parser.add_argument("--alert-cooldown", type=int,
                        help="seconds an alert stays up at least, to avoid thrashing (default: 120)")
    parser.add_argument("--step", type=float,
                        help="reporting step in seconds for rates and increases (default: 10)")
    parser.add_argument("--from-end", action="store_true", default=None,
                        help="skip lines already in the file")
    parser.add_argument("--metrics-port", type=int, help="serve Prometheus metrics on this port")
    parser.add_argument("--bootstrap-servers", help="publish alerts to this Kafka cluster")
    parser.add_argument("--alerts-topic", help="Kafka topic for alerts (default: access-log-alerts)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        cfg = build_config(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    stats = LogStatistics(cfg)

    sink = None
    if cfg.bootstrap_servers:
        from exporter.alert_sink import create_sink
        sink = create_sink(cfg.bootstrap_servers, cfg.alerts_topic, cfg.log_path)

    if cfg.metrics_port:
        from exporter import metrics
        metrics.start(cfg.metrics_port)
        print(f"Prometheus metrics server started on :{cfg.metrics_port}")

    try:
        log_file = open(cfg.log_path, encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"Cannot open log: {e}", file=sys.stderr)
        return 1

    print(f"Monitor started  log={cfg.log_path}  format={stats.log_format.id}  "
          f"depth={cfg.route_depth}  threshold={cfg.alert_threshold}rps")

    processed = 0
    alerts_fired = 0
    try:
        with log_file, ConsoleScreen(cfg.refresh_period_ms) as screen:
            if cfg.from_end:
                log_file.seek(0, os.SEEK_END)
            stats.log_buffer.resize(screen.log_capacity)

            while running:
                if screen.should_exit():
                    break

                resized = screen.resized()
                if resized:
                    stats.log_buffer.resize(screen.log_capacity)

                lines = read_lines(log_file, max(stats.log_buffer.capacity, 1))
                processed += len(lines)

                # One alert evaluation per poll, empty or not, so an alert
                # can still resolve while the log is quiet.
                for alert in stats.process_lines(lines):
                    if alert["type"] == "alert_fired":
                        alerts_fired += 1
                    if sink is not None:
                        sink.publish(alert)

                if cfg.metrics_port:
                    metrics.update(stats.snapshot(len(stats.routes)))

                screen.refresh(stats.snapshot(screen.stats_capacity), force=resized)

                if not lines:
                    time.sleep(cfg.refresh_period_ms / 1000)
    finally:
        if sink is not None:
            sink.flush()
        print(f"Done. {processed} lines processed, {stats.parse_errors} parse errors, "
              f"{alerts_fired} alerts fired.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
