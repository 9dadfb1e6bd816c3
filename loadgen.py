"""HTTP access log generator.

Appends realistic Common Log Format lines to a file so the monitor has
something to follow.  Traffic is spread over weighted route profiles; a
spike multiplier pushes the rate over the alert threshold and a small
fraction of garbage lines exercises the parse error path.

Usage:
    python loadgen.py
    python loadgen.py --output /tmp/access.log --eps 5
    python loadgen.py --eps 4 --spike 5 --spike-after 30 --spike-for 180
"""

import argparse
import random
import signal
import time
from dataclasses import dataclass
from datetime import datetime, timezone

USERS = ["-", "-", "-", "frank", "mary", "james"]
METHODS = ["GET", "GET", "GET", "POST", "PUT", "HEAD"]
STATUSES = [200, 200, 200, 200, 201, 204, 301, 304, 400, 403, 404, 500, 503]

running = True


def _shutdown(sig, frame):
    global running
    print("\nShutting down generator...")
    running = False


# ---------------------------------------------------------------------------
# Route profiles
# ---------------------------------------------------------------------------

@dataclass
class RouteProfile:
    prefix: str
    weight: float
    subpaths: tuple[str, ...]
    bytes_lo: int
    bytes_hi: int


PROFILES = [
    RouteProfile("/api", 5.0, ("users", "orders", "orders/42", "search?q=shoes"), 200, 4_000),
    RouteProfile("/pages", 3.0, ("create", "about", "contact", "home"), 2_000, 40_000),
    RouteProfile("/static", 2.0, ("app.js", "app.css", "img/logo.png"), 10_000, 900_000),
    RouteProfile("/report", 0.5, ("daily", "weekly/export.csv"), 50_000, 5_000_000),
    RouteProfile("/", 0.5, ("",), 500, 2_000),
]


# ---------------------------------------------------------------------------
# Line generation
# ---------------------------------------------------------------------------

def format_clf_line(client_ip, user, when, method, route, status, size,
                    protocol="HTTP/1.0") -> str:
    stamp = when.strftime("%d/%b/%Y:%H:%M:%S %z")
    return f'{client_ip} - {user} [{stamp}] "{method} {route} {protocol}" {status} {size}'


def make_line(profile: RouteProfile, when: datetime | None = None) -> str:
    """Generate one CLF line for a request against *profile*."""
    when = when or datetime.now(timezone.utc)
    sub = random.choice(profile.subpaths)
    route = f"{profile.prefix.rstrip('/')}/{sub}" if sub else profile.prefix
    return format_clf_line(
        client_ip=f"10.0.{random.randint(0, 255)}.{random.randint(1, 254)}",
        user=random.choice(USERS),
        when=when,
        method=random.choice(METHODS),
        route=route,
        status=random.choice(STATUSES),
        size=random.randint(profile.bytes_lo, profile.bytes_hi),
    )


def make_garbage_line() -> str:
    return random.choice([
        "",
        "GET /healthz",
        "malformed request line from a confused client",
        '10.0.0.1 - - [99/Foo/2020:99:99:99 +0000] "GET / HTTP/1.1" 200 12',
    ])


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description="HTTP access log generator")
    parser.add_argument("--output", default="/tmp/access.log")
    parser.add_argument("--eps", type=float, default=5, help="Target lines/sec")
    parser.add_argument("--garbage", type=float, default=0.01,
                        help="Fraction of unparseable lines")
    parser.add_argument("--spike", type=float, default=1.0,
                        help="Rate multiplier during the spike")
    parser.add_argument("--spike-after", type=float, default=60,
                        help="Seconds before the spike starts")
    parser.add_argument("--spike-for", type=float, default=180,
                        help="Spike duration in seconds")
    args = parser.parse_args()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    weights = [p.weight for p in PROFILES]

    print(f"Appending to '{args.output}' at ~{args.eps} lines/sec")
    for p in PROFILES:
        print(f"  {p.prefix:<10s} weight={p.weight:<4} bytes={p.bytes_lo}-{p.bytes_hi}")
    if args.spike != 1.0:
        print(f"  spike x{args.spike} from t+{args.spike_after:.0f}s "
              f"for {args.spike_for:.0f}s")

    count = 0
    start = time.time()
    with open(args.output, "a", encoding="utf-8") as out:
        while running:
            elapsed = time.time() - start
            in_spike = args.spike_after <= elapsed < args.spike_after + args.spike_for
            eps = args.eps * (args.spike if in_spike else 1.0)

            if random.random() < args.garbage:
                line = make_garbage_line()
            else:
                line = make_line(random.choices(PROFILES, weights=weights, k=1)[0])
            out.write(line + "\n")
            out.flush()

            count += 1
            if count % 500 == 0:
                print(f"  ... {count} lines written")

            time.sleep(1.0 / eps)

    print(f"Done. {count} lines written.")


if __name__ == "__main__":
    main()
