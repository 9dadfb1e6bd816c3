"""Kubernetes ingress-nginx upstreaminfo log format.

    log_format upstreaminfo '$the_real_ip - [$the_real_ip] - $remote_user [$time_local] "$request" $status
      $body_bytes_sent "$http_referer" "$http_user_agent" $request_length $request_time [$proxy_upstream_name]
      $upstream_addr $upstream_response_length $upstream_response_time $upstream_status $req_id';

Everything after $body_bytes_sent is ignored.
"""

import re

from monitor.formats import LogFormat


class IngressNginxFormat(LogFormat):
    id = "ingress_nginx"
    name = "ingress-nginx upstreaminfo"
    pattern = re.compile(
        r"^(?P<cip>\S+) - \[\S+\] - (?P<ru>\S+) \[(?P<lt>[\w:/]+\s[+\-]\d{4})\] "
        r'"(?P<mth>\w{3,4}) (?P<rt>\S+) (?P<pcl>HTTP/\d\.\d)" (?P<st>\d{3}) (?P<sz>\d+).*$'
    )
