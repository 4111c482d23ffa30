"""A named cookie with a reversible value pipeline.

Write side, applied when the value is set::

    value -> JSON (non-strings) -> encrypt (optional) -> prefix (optional)

Read side, applied to the raw request value by ``http_value()``, in
strict inverse order::

    raw -> percent-decode (unless raw) -> strip prefix -> decrypt -> JSON

The cookie also carries a queued flag. Queued cookies are drained by
``CookieJar.fetch_queued()`` and written to the response by
``QueuedCookiesMiddleware``.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

from crumbjar._internal.booleans import parse_bool
from crumbjar.config import CookieOptions
from crumbjar.context import get_request
from crumbjar.crypto import Encrypter, derive_key
from crumbjar.errors import ConfigurationError, DecodingError, EncodingError
from crumbjar.http.cookies import SetCookie
from crumbjar.http.request import Request

if TYPE_CHECKING:
    from crumbjar.jar import CookieJar

logger = logging.getLogger("crumbjar.cookie")

FIVE_YEARS = 60 * 60 * 24 * 365 * 5

# Numeric strings are returned verbatim, never JSON-decoded
_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

_SAMESITE_VALUES = frozenset({"lax", "strict", "none"})

# Characters that break a Set-Cookie header when left unescaped
_RESERVED_NAME_CHARS = frozenset("=,; \t\r\n\v\f")
_RESERVED_RAW_CHARS = frozenset(",; \t\r\n\v\f")


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON; the value is a plain string
    msg = f"Non-standard JSON constant {name}"
    raise ValueError(msg)


class Cookie:
    """One named cookie: alias, transformation settings, and wire form.

    Built by ``CookieJar.make()``, which supplies jar defaults for
    anything the options leave unset::

        cookie = jar.make("cart", value={"items": [1, 2]}, encrypted=True)
        cookie.queue()

        # On a later request
        cart = jar.get("cart").http_value(request)
    """

    __slots__ = ("_alias", "_data", "_encrypted", "_prefix", "_queued", "_wire")

    def __init__(self, alias: str, options: CookieOptions, jar: CookieJar) -> None:
        self._alias = alias
        self._queued = False

        name = options.name or alias
        salt = options.salt if options.salt is not None else jar.salt
        if isinstance(salt, str):
            name += salt
        name = name.replace(".", "_")
        if not name:
            msg = "Cookie name must not be empty."
            raise ConfigurationError(msg)
        if not _RESERVED_NAME_CHARS.isdisjoint(name):
            msg = f"Cookie name {name!r} contains reserved characters (=,; or whitespace)."
            raise ConfigurationError(msg)

        self._encrypted = parse_bool(options.encrypted)

        prefix = options.prefix
        if prefix and not isinstance(prefix, str):
            msg = f"Cookie prefix must be a string, got {type(prefix).__name__}."
            raise ConfigurationError(msg)
        self._prefix = prefix or None

        defaults = jar.get_defaults(
            options.path,
            options.domain,
            options.secure,
            options.httponly,
            options.raw,
            options.samesite,
        )
        samesite = defaults.samesite.lower() if defaults.samesite else None
        if samesite is not None and samesite not in _SAMESITE_VALUES:
            msg = f"Cookie samesite must be one of lax, strict, none; got {defaults.samesite!r}."
            raise ConfigurationError(msg)

        self._data = options.value
        self._wire = SetCookie(
            name=name,
            value=self._encode(options.value, raw=defaults.raw),
            expires=jar.get_availability(options.lifetime),
            path=defaults.path or "/",
            domain=defaults.domain,
            secure=defaults.secure,
            httponly=defaults.httponly,
            samesite=samesite,
            raw=defaults.raw,
        )

    def __repr__(self) -> str:
        return (
            f"Cookie(alias={self._alias!r}, name={self.name!r}, "
            f"encrypted={self._encrypted}, queued={self._queued})"
        )

    def __str__(self) -> str:
        return self._wire.to_header_value()

    # -- Write side --

    def _to_json(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        try:
            return json.dumps(value, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError, RecursionError) as exc:
            msg = f"Cookie {self._alias!r} could not encode the value in JSON"
            raise EncodingError(msg) from exc

    def _encode(self, value: Any, *, raw: bool) -> str | None:
        if value is None:
            return None
        value = self._to_json(value)
        if self._encrypted:
            value = self.encrypt(value)
        if self._prefix:
            value = self._prefix + value
        # Raw values go on the wire unescaped
        if raw and not _RESERVED_RAW_CHARS.isdisjoint(value):
            msg = f"Raw cookie {self._alias!r} value contains ',', ';' or whitespace"
            raise EncodingError(msg)
        return value

    def _from_json(self, value: str) -> Any:
        if _NUMERIC_RE.match(value):
            return value
        try:
            return json.loads(value, parse_constant=_reject_constant)
        except ValueError:
            return value
        except RecursionError as exc:
            msg = f"Cookie {self._alias!r} could not decode the value from JSON"
            raise DecodingError(msg) from exc

    def set_value(self, value: Any) -> Cookie:
        """Replace the value, running it through the write pipeline."""
        encoded = self._encode(value, raw=self.raw)
        self._data = value
        self._wire = replace(self._wire, value=encoded)
        return self

    def encrypt(self, plain: str) -> str:
        """Encrypt *plain* with the key derived from this cookie's alias."""
        return Encrypter(derive_key(self._alias)).encrypt(plain)

    def decrypt(self, hashed: str) -> str:
        """Decrypt *hashed* with the key derived from this cookie's alias.

        Raises ``DecodingError`` on tampered or foreign ciphertext.
        """
        try:
            return Encrypter(derive_key(self._alias)).decrypt(hashed)
        except DecodingError:
            logger.debug("Rejected undecryptable value for cookie %r", self._alias)
            raise

    # -- Read side --

    def http_value(self, request: Request | None = None) -> Any:
        """Read and decode this cookie's value from *request*.

        Uses the current request (``crumbjar.context.get_request``) when
        none is given. Returns ``None`` if the request does not carry the
        cookie. Raises ``DecodingError`` if an encrypted value fails to
        decrypt.
        """
        if request is None:
            request = get_request()

        value = request.cookies.get(self.name)
        if not value:
            return None

        if not self.raw:
            value = unquote(value)

        if self._prefix:
            value = value[len(self._prefix) :]

        if self._encrypted:
            value = self.decrypt(value)

        return self._from_json(value)

    def check_request_value(self, request: Request | None = None, value: Any = None) -> bool:
        """True if the request carries this cookie with exactly *value*.

        *value* defaults to the application value the cookie was given.
        It is compared in the shape ``http_value()`` reads it back in, so
        ``42`` matches the request string ``"42"``.
        """
        http_value = self.http_value(request)
        if http_value is None:
            return False
        if value is None:
            value = self._data
        if value is None:
            return False
        return self._from_json(self._to_json(value)) == http_value

    # -- Lifecycle --

    def clear(self) -> Cookie:
        """Empty the value and expire the cookie five years ago."""
        self._data = None
        self._wire = replace(self._wire, value=None, expires=int(time.time()) - FIVE_YEARS)
        return self

    def never(self) -> Cookie:
        """Push the expiration five years into the future."""
        self._wire = replace(self._wire, expires=int(time.time()) + FIVE_YEARS)
        return self

    def queue(self) -> Cookie:
        """Mark the cookie for emission on the current response."""
        self._queued = True
        return self

    def unqueue(self) -> Cookie:
        """Withdraw the cookie from the current response."""
        self._queued = False
        return self

    def to_set_cookie(self) -> SetCookie:
        """The wire-level ``Set-Cookie`` directive for this cookie."""
        return self._wire

    # -- Accessors --

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def is_queued(self) -> bool:
        return self._queued

    @property
    def is_encrypted(self) -> bool:
        return self._encrypted

    @property
    def prefix(self) -> str | None:
        return self._prefix

    @property
    def name(self) -> str:
        return self._wire.name

    @property
    def value(self) -> str | None:
        """The encoded value as it travels on the wire."""
        return self._wire.value

    @property
    def expires(self) -> int:
        return self._wire.expires

    @property
    def path(self) -> str:
        return self._wire.path

    @property
    def domain(self) -> str | None:
        return self._wire.domain

    @property
    def secure(self) -> bool:
        return self._wire.secure

    @property
    def httponly(self) -> bool:
        return self._wire.httponly

    @property
    def raw(self) -> bool:
        return self._wire.raw

    @property
    def samesite(self) -> str | None:
        return self._wire.samesite
