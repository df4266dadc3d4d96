"""Tests for the HTTP helper."""

from __future__ import annotations

import io
from urllib.error import HTTPError, URLError

import pytest

from compinit import net
from compinit.context import RunContext
from compinit.errors import Cancelled, FetchFailed


class FakeResponse:
    def __init__(self, payload: bytes) -> None:
        self._buffer = io.BytesIO(payload)

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_fetch_returns_body(monkeypatch) -> None:
    captured = {}

    def fake_urlopen(request, timeout=None):
        captured["url"] = request.full_url
        captured["method"] = request.get_method()
        captured["agent"] = request.get_header("User-agent")
        captured["timeout"] = timeout
        return FakeResponse(b"x" * 100_000)

    monkeypatch.setattr(net, "urlopen", fake_urlopen)

    body = net.HttpFetcher(timeout=12.5)("https://registry.example.com/index")

    assert body == b"x" * 100_000
    assert captured == {
        "url": "https://registry.example.com/index",
        "method": "GET",
        "agent": "compinit",
        "timeout": 12.5,
    }


def test_fetch_wraps_http_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise HTTPError(request.full_url, 404, "Not Found", hdrs=None, fp=None)

    monkeypatch.setattr(net, "urlopen", fake_urlopen)

    with pytest.raises(FetchFailed, match="HTTP 404"):
        net.fetch("https://registry.example.com/devfiles/missing")


def test_fetch_wraps_connection_errors(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise URLError("connection refused")

    monkeypatch.setattr(net, "urlopen", fake_urlopen)

    with pytest.raises(FetchFailed, match="connection refused"):
        net.fetch("https://registry.example.com/index")


def test_fetch_checks_cancellation_before_request(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(net, "urlopen", lambda *args, **kwargs: calls.append(args))
    ctx = RunContext()
    ctx.cancel()

    with pytest.raises(Cancelled):
        net.fetch("https://registry.example.com/index", ctx=ctx)

    assert calls == []


@pytest.mark.parametrize(
    "location, expected",
    [
        ("https://example.com/devfile.yaml", True),
        ("http://localhost:8080/devfile.yaml", True),
        ("./devfile.yaml", False),
        ("/abs/devfile.yaml", False),
        ("file:///tmp/devfile.yaml", False),
    ],
)
def test_is_url(location: str, expected: bool) -> None:
    assert net.is_url(location) is expected
