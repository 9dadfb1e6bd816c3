"""Common Log Format, as written by Apache and nginx's default combined-less
access log:

    127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326
"""

import re

from monitor.formats import LogFormat


class CommonLogFormat(LogFormat):
    id = "clf"
    name = "Common Log Format"
    pattern = re.compile(
        r"^(?P<cip>\S+) - (?P<ru>\S+) \[(?P<lt>[\w:/]+\s[+\-]\d{4})\] "
        r'"(?P<mth>\w{3,4}) (?P<rt>\S+) (?P<pcl>HTTP/\d\.\d)" (?P<st>\d{3}) (?P<sz>\d+)$'
    )
