"""Per-route aggregation with a ranked top-K view.

State: dict[route_prefix, RouteStats] plus a sorted index of
(-hits, route) keys.  The index key is derived from counters that change
on every hit, so an entry is always removed from the index *before* its
counters are touched and re-inserted afterwards.
"""

from bisect import bisect_left, insort
from dataclasses import dataclass

from monitor.clock import Clock
from monitor.rolling_counter import RollingCounter


def route_section(route: str, max_depth: int) -> str:
    """Truncate *route* to its first *max_depth* path segments.

    For a depth of 1 the section is what comes before the second '/', e.g.
    "/pages/create" -> "/pages".  A query string inside the section is
    dropped.  Depth is not validated: callers pass depth >= 1.
    """
    cutoff = 0
    for _ in range(max_depth):
        ix = route.find("/", cutoff + 1)
        if ix > 0:
            cutoff = ix
        else:
            cutoff = len(route)
            break
    section = route[:max(1, cutoff)]
    q = section.find("?")
    if q > 0:
        section = section[:q]
    return section


@dataclass(frozen=True)
class RouteSnapshot:
    route: str
    hits: int
    increase: int
    throughput: float  # bytes/sec over the last step


class RouteStats:
    """Hit and byte counters for one route prefix.  Identity is the route."""

    __slots__ = ("route", "hits", "bytes_sent")

    def __init__(self, route: str, clock: Clock, step_ms: int):
        self.route = route
        self.hits = RollingCounter(clock, step_ms)
        self.bytes_sent = RollingCounter(clock, step_ms)

    def rank_key(self) -> tuple[float, str]:
        return (-self.hits.count(), self.route)

    def snapshot(self) -> RouteSnapshot:
        return RouteSnapshot(
            route=self.route,
            hits=int(self.hits.count()),
            increase=int(self.hits.increase()),
            throughput=self.bytes_sent.mean(),
        )

    def __eq__(self, other):
        if not isinstance(other, RouteStats):
            return NotImplemented
        return self.route == other.route

    def __hash__(self):
        return hash(self.route)

    def __repr__(self):
        return f"RouteStats({self.route!r}, hits={self.hits.count():.0f})"


class RouteAggregator:

    def __init__(self, clock: Clock, step_ms: int):
        self._clock = clock
        self._step_ms = step_ms
        self._routes: dict[str, RouteStats] = {}
        # Sorted ascending, so the most hit route comes first.
        self._ranked: list[tuple[float, str]] = []

    def ingest(self, route_prefix: str, bytes_sent: int) -> None:
        """Count one hit of *bytes_sent* bytes against *route_prefix*."""
        stats = self._routes.get(route_prefix)
        if stats is None:
            stats = RouteStats(route_prefix, self._clock, self._step_ms)
            self._routes[route_prefix] = stats
        else:
            self._unrank(stats)

        stats.hits.increment()
        stats.bytes_sent.increment(bytes_sent)
        insort(self._ranked, stats.rank_key())

    def top(self, k: int) -> tuple[RouteSnapshot, ...]:
        """The *k* most hit routes, ties broken by route ascending."""
        if k <= 0:
            return ()
        return tuple(
            self._routes[route].snapshot() for _, route in self._ranked[:k]
        )

    def get(self, route_prefix: str) -> RouteStats | None:
        return self._routes.get(route_prefix)

    def _unrank(self, stats: RouteStats) -> None:
        key = stats.rank_key()
        ix = bisect_left(self._ranked, key)
        if ix < len(self._ranked) and self._ranked[ix] == key:
            del self._ranked[ix]

    def __contains__(self, route_prefix: str) -> bool:
        return route_prefix in self._routes

    def __len__(self) -> int:
        return len(self._routes)
