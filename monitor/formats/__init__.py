# Log formats as Python classes, one module per format.
#
# Every format reads the same handful of fields (client, user, time,
# request line, status, size); they only differ in the regex that finds
# them.  Adding a format means adding a module with a new pattern and
# registering it in ALL_FORMATS below.

import re
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlsplit

# 10/Oct/2000:13:55:36 -0700
CLF_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


@dataclass(frozen=True)
class LogEvent:
    client_ip: str
    remote_user: str | None
    local_time: datetime
    method: str
    route: str
    protocol: str
    status: int
    bytes_sent: int

    def __str__(self):
        return (f'{self.client_ip} - {self.remote_user or "-"} '
                f'[{self.local_time.strftime(CLF_TIME_FORMAT)}] '
                f'"{self.method} {self.route} {self.protocol}" '
                f'{self.status} {self.bytes_sent}')


class LogFormat:
    """Base log format. Subclasses set id, name and pattern.

    The pattern must define the named groups cip, ru, lt, mth, rt, pcl, st
    and sz.
    """

    id: str
    name: str
    pattern: re.Pattern

    def parse(self, line: str) -> LogEvent | None:
        """Parse one line, or return None if it doesn't match the format."""
        m = self.pattern.match(line.rstrip("\r\n"))
        if m is None:
            return None
        try:
            local_time = datetime.strptime(m.group("lt"), CLF_TIME_FORMAT)
        except ValueError:
            return None  # right shape, impossible date
        user = m.group("ru")
        return LogEvent(
            client_ip=m.group("cip"),
            remote_user=None if user == "-" else user,
            local_time=local_time,
            method=m.group("mth"),
            route=_cleanup_route(m.group("rt")),
            protocol=m.group("pcl"),
            status=int(m.group("st")),
            bytes_sent=int(m.group("sz")),
        )


def _cleanup_route(route: str) -> str:
    """Absolute-form request targets (proxies) are reduced to their path."""
    if route.startswith("http"):
        try:
            return urlsplit(route).path or "/"
        except ValueError:
            pass
    return route


from monitor.formats.clf import CommonLogFormat
from monitor.formats.ingress_nginx import IngressNginxFormat

ALL_FORMATS = {f.id: f for f in (CommonLogFormat(), IngressNginxFormat())}


def get_format(format_id: str) -> LogFormat:
    try:
        return ALL_FORMATS[format_id.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log format '{format_id}' "
            f"(expected one of: {', '.join(sorted(ALL_FORMATS))})"
        ) from None
