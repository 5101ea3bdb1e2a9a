"""Tests for DeviceResolver: all tests mock urllib.request.urlopen."""

import http.client
import json
import urllib.error
from unittest.mock import MagicMock, patch

from logcast.capture.resolver import DeviceResolver


def _response(payload):
    mock_resp = MagicMock()
    mock_resp.read.return_value = (
        payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    )
    ctx = MagicMock()
    ctx.__enter__ = MagicMock(return_value=mock_resp)
    ctx.__exit__ = MagicMock(return_value=False)
    return ctx


class TestDeviceResolver:
    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_reads_udid_capability(self, mock_urlopen):
        mock_urlopen.return_value = _response(
            {"value": {"capabilities": {"appium:udid": "emulator-5554"}}}
        )
        resolver = DeviceResolver(timeout=3)
        assert resolver.resolve("http://localhost:4723/", "abc") == "emulator-5554"

        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "http://localhost:4723/session/abc"
        assert mock_urlopen.call_args[1]["timeout"] == 3

    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_missing_capability(self, mock_urlopen):
        mock_urlopen.return_value = _response({"value": {"capabilities": {}}})
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_non_string_udid(self, mock_urlopen):
        mock_urlopen.return_value = _response(
            {"value": {"capabilities": {"appium:udid": 42}}}
        )
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_malformed_body(self, mock_urlopen):
        mock_urlopen.return_value = _response(b"<html>not json</html>")
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_unexpected_shape(self, mock_urlopen):
        mock_urlopen.return_value = _response(["value"])
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch(
        "logcast.capture.resolver.urllib.request.urlopen",
        side_effect=urllib.error.URLError("connection refused"),
    )
    def test_network_failure(self, mock_urlopen):
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch(
        "logcast.capture.resolver.urllib.request.urlopen",
        side_effect=TimeoutError("timed out"),
    )
    def test_timeout(self, mock_urlopen):
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch(
        "logcast.capture.resolver.urllib.request.urlopen",
        side_effect=http.client.BadStatusLine("garbage"),
    )
    def test_non_http_peer(self, mock_urlopen):
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None

    @patch("logcast.capture.resolver.urllib.request.urlopen")
    def test_truncated_body(self, mock_urlopen):
        ctx = _response({})
        ctx.__enter__.return_value.read.side_effect = http.client.IncompleteRead(b"{")
        mock_urlopen.return_value = ctx
        assert DeviceResolver().resolve("http://localhost:4723", "abc") is None
