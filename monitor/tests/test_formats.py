"""Tests for log formats: field extraction, rejects, route cleanup."""

from datetime import datetime, timedelta, timezone

import pytest

import loadgen
from monitor.formats import ALL_FORMATS, LogEvent, get_format
from monitor.formats.clf import CommonLogFormat
from monitor.formats.ingress_nginx import IngressNginxFormat

CLF_LINE = '127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /apache_pb.gif HTTP/1.0" 200 2326'
NGINX_LINE = ('10.0.0.1 - [10.0.0.1] - - [10/Oct/2000:13:55:36 -0700] '
              '"POST /api/users HTTP/1.1" 201 512 "-" "curl/7.64" 120 0.003 '
              '[default-api-80] 10.1.2.3:80 512 0.003 201 abc123')


class TestCommonLogFormat:
    def setup_method(self):
        self.fmt = CommonLogFormat()

    def test_parses_all_fields(self):
        evt = self.fmt.parse(CLF_LINE)
        assert evt == LogEvent(
            client_ip="127.0.0.1",
            remote_user="frank",
            local_time=datetime(2000, 10, 10, 13, 55, 36,
                                tzinfo=timezone(timedelta(hours=-7))),
            method="GET",
            route="/apache_pb.gif",
            protocol="HTTP/1.0",
            status=200,
            bytes_sent=2326,
        )

    def test_dash_user_is_none(self):
        evt = self.fmt.parse(CLF_LINE.replace("frank", "-"))
        assert evt.remote_user is None

    def test_trailing_newline_is_ignored(self):
        assert self.fmt.parse(CLF_LINE + "\n") is not None

    def test_absolute_url_reduced_to_path(self):
        evt = self.fmt.parse(CLF_LINE.replace("/apache_pb.gif", "http://example.com/pages/create?x=1"))
        assert evt.route == "/pages/create"

    def test_absolute_url_without_path_is_root(self):
        evt = self.fmt.parse(CLF_LINE.replace("/apache_pb.gif", "http://example.com"))
        assert evt.route == "/"

    def test_str_renders_clf(self):
        assert str(self.fmt.parse(CLF_LINE)) == CLF_LINE

    @pytest.mark.parametrize("line", [
        "",
        "garbage",
        CLF_LINE.replace(" 2326", " -"),                      # no size
        CLF_LINE.replace("GET", "DELETE"),                    # method too long
        CLF_LINE.replace("HTTP/1.0", "HTTP/2"),
        CLF_LINE.replace("10/Oct/2000", "99/Foo/2000"),       # impossible date
        CLF_LINE + " trailing",
    ])
    def test_rejects(self, line):
        assert self.fmt.parse(line) is None


class TestIngressNginxFormat:
    def setup_method(self):
        self.fmt = IngressNginxFormat()

    def test_parses_and_ignores_trailing_fields(self):
        evt = self.fmt.parse(NGINX_LINE)
        assert evt.client_ip == "10.0.0.1"
        assert evt.remote_user is None
        assert evt.method == "POST"
        assert evt.route == "/api/users"
        assert evt.status == 201
        assert evt.bytes_sent == 512

    def test_rejects_plain_clf(self):
        assert self.fmt.parse(CLF_LINE) is None


class TestRegistry:
    def test_all_formats_registered(self):
        assert set(ALL_FORMATS) == {"clf", "ingress_nginx"}

    def test_lookup_is_case_insensitive(self):
        assert get_format("CLF").id == "clf"

    def test_unknown_format_raises(self):
        with pytest.raises(ValueError, match="Unknown log format"):
            get_format("w3c")


class TestGeneratedLines:
    def test_generated_lines_parse(self):
        fmt = CommonLogFormat()
        for profile in loadgen.PROFILES:
            evt = fmt.parse(loadgen.make_line(profile))
            assert evt is not None
            assert evt.route.startswith(profile.prefix)
            assert profile.bytes_lo <= evt.bytes_sent <= profile.bytes_hi
