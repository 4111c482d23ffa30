"""Immutable HTTP request.

Frozen metadata only. The cookie pipeline reads request cookies and
never the body, so no body access is exposed here.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from crumbjar._internal.asgi import Scope
from crumbjar.http.cookies import parse_cookies
from crumbjar.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Cookies are parsed once at creation time (in ``from_asgi``) and stored
    as a frozen field — not re-parsed on every access. Values are kept
    exactly as sent by the client.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    cookies: Mapping[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    client: tuple[str, int] | None = None

    @classmethod
    def from_asgi(cls, scope: Scope) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        client: Any = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            cookies=parse_cookies(headers.get("cookie", "")),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )
