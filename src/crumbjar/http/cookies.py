"""Cookie parsing and SetCookie serialization.

Consolidates the read side (parse_cookies, used by Request) and the
write side (SetCookie, used by Response and Cookie) in one module.
"""

import time
from dataclasses import dataclass
from email.utils import formatdate
from urllib.parse import quote

# RFC 6265 cookie-octets that survive without percent-encoding
_SAFE_VALUE_CHARS = "!#$&'()*+-./:<=>?@[]^_`{|}~"

_ONE_YEAR = 365 * 24 * 60 * 60


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Values are returned exactly as sent; percent-decoding is left to
    the consumer. Returns an empty dict for empty or missing headers.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" in pair:
            key, _, value = pair.partition("=")
            cookies[key.strip()] = value.strip()
    return cookies


@dataclass(frozen=True, slots=True)
class SetCookie:
    """A ``Set-Cookie`` directive attached to a Response.

    ``expires`` is an absolute Unix timestamp; ``0`` means a session
    cookie. ``raw`` disables percent-encoding of the value.
    """

    name: str
    value: str | None
    expires: int = 0
    max_age: int | None = None
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str | None = "lax"
    raw: bool = False

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        if not self.value:
            # Deletion: browsers drop the cookie on an expired date
            parts = [
                f"{self.name}=deleted",
                f"Expires={formatdate(time.time() - _ONE_YEAR, usegmt=True)}",
                "Max-Age=0",
            ]
        else:
            value = self.value if self.raw else quote(self.value, safe=_SAFE_VALUE_CHARS)
            parts = [f"{self.name}={value}"]
            if self.expires:
                max_age = max(0, int(self.expires - time.time()))
                parts.append(f"Expires={formatdate(self.expires, usegmt=True)}")
                parts.append(f"Max-Age={max_age}")
            elif self.max_age is not None:
                parts.append(f"Max-Age={self.max_age}")
        if self.path:
            parts.append(f"Path={self.path}")
        if self.domain:
            parts.append(f"Domain={self.domain}")
        if self.secure:
            parts.append("Secure")
        if self.httponly:
            parts.append("HttpOnly")
        if self.samesite:
            parts.append(f"SameSite={self.samesite}")
        return "; ".join(parts)
