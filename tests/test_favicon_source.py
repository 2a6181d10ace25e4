"""Tests for HTTP favicon downloads."""

import pytest
import requests

from window_finder.exceptions import FaviconError
from window_finder.sources.favicon_source import RequestsFaviconSource, favicon_candidates


class FakeResponse:
    def __init__(self, status_code=200, content=b"", content_type="image/png"):
        self.status_code = status_code
        self.content = content
        self.headers = {"Content-Type": content_type}


class FakeSession:
    """Replays responses (or exceptions) per requested URL."""

    def __init__(self, responses):
        self.responses = responses
        self.headers = {}
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append((url, timeout))
        response = self.responses.get(url, FakeResponse(404))
        if isinstance(response, Exception):
            raise response
        return response


def test_candidates():
    assert favicon_candidates("https://github.com/foo?bar=1") == [
        "https://www.google.com/s2/favicons?domain=github.com&sz=32",
        "https://icons.duckduckgo.com/ip3/github.com.ico",
        "https://github.com/favicon.ico",
    ]
    assert favicon_candidates("not a url") == []


def test_first_service_wins():
    google = "https://www.google.com/s2/favicons?domain=github.com&sz=32"
    session = FakeSession({google: FakeResponse(content=b"png")})
    source = RequestsFaviconSource(session=session, timeout=2)

    assert source.fetch("https://github.com/") == b"png"
    assert session.requested == [(google, 2)]


def test_falls_through_errors_and_non_images():
    google = "https://www.google.com/s2/favicons?domain=example.com&sz=32"
    ddg = "https://icons.duckduckgo.com/ip3/example.com.ico"
    site = "https://example.com/favicon.ico"
    session = FakeSession({
        google: requests.ConnectionError("offline"),
        ddg: FakeResponse(content=b"<html>", content_type="text/html"),
        site: FakeResponse(content=b"ico", content_type="image/x-icon"),
    })
    source = RequestsFaviconSource(session=session)

    assert source.fetch("https://example.com/page") == b"ico"
    assert [url for url, _ in session.requested] == [google, ddg, site]


def test_no_favicon_raises():
    source = RequestsFaviconSource(session=FakeSession({}))

    with pytest.raises(FaviconError):
        source.fetch("https://example.com/")
    with pytest.raises(FaviconError):
        source.fetch("about:blank")
