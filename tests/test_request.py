"""Tests for crumbjar.http.request — Request.from_asgi and cookies."""

import pytest

from crumbjar.http.request import Request


def _scope(*headers: tuple[bytes, bytes], **extra: object) -> dict:
    scope = {"type": "http", "method": "GET", "path": "/", "headers": list(headers)}
    scope.update(extra)
    return scope


class TestFromAsgi:
    def test_basic_fields(self) -> None:
        request = Request.from_asgi(
            _scope(method="POST", path="/login", http_version="2", client=["10.0.0.1", 5000])
        )
        assert request.method == "POST"
        assert request.path == "/login"
        assert request.http_version == "2"
        assert request.client == ("10.0.0.1", 5000)

    def test_cookies_parsed_once(self) -> None:
        request = Request.from_asgi(_scope((b"cookie", b"session_v1=abc; theme=dark")))
        assert request.cookies == {"session_v1": "abc", "theme": "dark"}

    def test_no_cookie_header(self) -> None:
        assert Request.from_asgi(_scope()).cookies == {}

    def test_cookie_values_kept_encoded(self) -> None:
        request = Request.from_asgi(_scope((b"cookie", b"a=%22x%22")))
        assert request.cookies["a"] == "%22x%22"

    def test_frozen(self) -> None:
        request = Request(method="GET", path="/")
        with pytest.raises(AttributeError):
            request.path = "/other"  # type: ignore[misc]
