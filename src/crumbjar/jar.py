"""CookieJar — registry of named cookies and jar-wide defaults.

The jar builds cookies seeded with its defaults, resolves lifetimes to
absolute expirations, and drains queued cookies for the response::

    jar = CookieJar(JarConfig(lifetime=3600, salt="_v1"))
    jar.make("session", value={"uid": 42}).queue()

    for cookie in jar.fetch_queued():
        response = response.with_set_cookie(cookie.to_set_cookie())

One jar per in-flight request. ``QueuedCookiesMiddleware`` creates and
binds it; handlers reach it through ``crumbjar.context.get_jar()``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from dataclasses import replace
from datetime import datetime
from typing import Any, NamedTuple

from crumbjar._internal.booleans import parse_bool
from crumbjar._internal.timeparse import parse_expression
from crumbjar.config import COOKIE_OPTION_FIELDS, CookieOptions, JarConfig, Lifetime
from crumbjar.cookie import Cookie
from crumbjar.errors import ConfigurationError, LifetimeTypeError

logger = logging.getLogger("crumbjar.jar")

_NUMERIC_LIFETIME_CHARS = frozenset("0123456789")


class CookieDefaults(NamedTuple):
    """Resolved cookie attributes, in ``Set-Cookie`` order."""

    path: str | None
    domain: str | None
    secure: bool
    httponly: bool
    raw: bool
    samesite: str | None


def _is_lifetime(value: object) -> bool:
    # bool is an int subclass but never a lifetime
    return not isinstance(value, bool) and isinstance(value, int | str | datetime)


def _supplied(value: bool | str | None, default: bool | None) -> bool | str | None:
    return default if value is None or value == "" else value


class CookieJar:
    """Named registry of cookies plus jar-wide defaults.

    Re-making an alias replaces the previous cookie (last write wins).
    """

    __slots__ = (
        "_cookies",
        "_lifetime",
        "_salt",
        "domain",
        "httponly",
        "path",
        "raw",
        "samesite",
        "secure",
    )

    def __init__(self, config: JarConfig | None = None) -> None:
        config = config or JarConfig()
        self._cookies: dict[str, Cookie] = {}
        self._lifetime: Lifetime = 0
        self._salt: str | None = None

        self.set_defaults(
            config.path,
            config.domain,
            config.secure,
            config.httponly,
            config.raw,
            config.samesite,
        )
        self.set_lifetime(config.lifetime)
        if config.salt is not None:
            self.set_salt(config.salt)

    def __repr__(self) -> str:
        return f"CookieJar(cookies={list(self._cookies)!r})"

    # -- Registry --

    def make(self, alias: str, options: CookieOptions | None = None, **fields: Any) -> Cookie:
        """Build a cookie from *options* and keyword fields, and register it.

        Keyword fields are ``CookieOptions`` field names and take
        precedence over *options*. Any cookie already registered under
        *alias* is replaced.
        """
        unknown = set(fields) - COOKIE_OPTION_FIELDS
        if unknown:
            msg = f"Unknown cookie option(s): {', '.join(sorted(unknown))}"
            raise ConfigurationError(msg)
        options = replace(options or CookieOptions(), **fields)

        cookie = Cookie(alias, options, self)
        if alias in self._cookies:
            logger.debug("Replacing cookie %r", alias)
        self._cookies[alias] = cookie
        return cookie

    def add(self, cookie: Cookie) -> CookieJar:
        """Register a pre-built cookie under its own alias."""
        self._cookies[cookie.alias] = cookie
        return self

    def get(self, alias: str) -> Cookie | None:
        """Return the cookie registered under *alias*, or None."""
        return self._cookies.get(alias)

    def all(self) -> dict[str, Cookie]:
        """The live alias -> cookie registry."""
        return self._cookies

    def __contains__(self, alias: object) -> bool:
        return alias in self._cookies

    def __iter__(self) -> Iterator[Cookie]:
        return iter(self._cookies.values())

    def __len__(self) -> int:
        return len(self._cookies)

    def fetch_queued(self) -> list[Cookie]:
        """Drain the queue: return queued cookies in registry order.

        Each returned cookie is unqueued, so an immediate second call
        returns an empty list.
        """
        queued = [cookie for cookie in self._cookies.values() if cookie.is_queued]
        for cookie in queued:
            cookie.unqueue()
        if queued:
            logger.debug("Drained %d queued cookie(s)", len(queued))
        return queued

    # -- Expiration --

    def get_availability(self, lifetime: Lifetime | None = None) -> int:
        """Resolve *lifetime* to an absolute Unix timestamp.

        ``None`` uses the jar lifetime. Integers (and numeric strings)
        are seconds from now, other strings are textual date
        expressions, datetimes are absolute. ``0`` means a session
        cookie and is returned as-is.

        Raises ``LifetimeTypeError`` for any other kind of value and
        ``LifetimeParseError`` for an unparseable expression.
        """
        if lifetime is None:
            lifetime = self._lifetime

        if not _is_lifetime(lifetime):
            msg = (
                "Unable to determine cookie availability, lifetime must be an int, "
                f"a str, or a datetime; got {type(lifetime).__name__}"
            )
            raise LifetimeTypeError(msg)

        now = time.time()

        if isinstance(lifetime, datetime):
            return int(lifetime.timestamp())

        if isinstance(lifetime, str):
            text = lifetime.strip()
            digits = text[1:] if text[:1] in ("+", "-") else text
            if digits and set(digits) <= _NUMERIC_LIFETIME_CHARS:
                lifetime = int(text)
            else:
                return parse_expression(text, now)

        if lifetime == 0:
            return 0
        return int(now) + lifetime

    # -- Defaults --

    def get_defaults(
        self,
        path: str | None = None,
        domain: str | None = None,
        secure: bool | str | None = None,
        httponly: bool | str | None = None,
        raw: bool | str | None = None,
        samesite: str | None = None,
    ) -> CookieDefaults:
        """Resolve cookie attributes against the jar defaults.

        Empty or ``None`` values fall back to the jar. An explicit
        ``False`` flag is kept. Flags always pass through the permissive
        boolean parse.
        """
        return CookieDefaults(
            path=path or self.path,
            domain=domain or self.domain,
            secure=parse_bool(_supplied(secure, self.secure)),
            httponly=parse_bool(_supplied(httponly, self.httponly)),
            raw=parse_bool(_supplied(raw, self.raw)),
            samesite=samesite or self.samesite,
        )

    def set_defaults(
        self,
        path: str | None = None,
        domain: str | None = None,
        secure: bool | str | None = None,
        httponly: bool | str | None = None,
        raw: bool | str | None = None,
        samesite: str | None = None,
    ) -> CookieJar:
        """Replace every jar default. Unset ``httponly`` is True, unset ``raw`` False."""
        self.path = path
        self.domain = domain
        self.secure = parse_bool(secure) if secure is not None else None
        self.httponly = parse_bool(httponly if httponly is not None else True)
        self.raw = parse_bool(raw if raw is not None else False)
        self.samesite = samesite
        return self

    @property
    def lifetime(self) -> Lifetime:
        return self._lifetime

    def set_lifetime(self, lifetime: Any) -> CookieJar:
        """Set the default lifetime. Unsupported kinds become ``0`` (session)."""
        if not _is_lifetime(lifetime):
            logger.warning(
                "Ignoring cookie lifetime of type %s; using session cookies",
                type(lifetime).__name__,
            )
            lifetime = 0
        self._lifetime = lifetime
        return self

    @property
    def salt(self) -> str | None:
        return self._salt

    def get_salt(self) -> str | None:
        """Return the suffix appended to cookie names."""
        return self._salt

    def set_salt(self, salt: str) -> CookieJar:
        """Set the suffix appended to every cookie name made afterwards."""
        self._salt = salt
        return self
