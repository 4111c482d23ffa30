"""Crumbjar exception hierarchy.

Shared across Cookie, CookieJar, the cipher, and middleware so every
module raises and catches the same types.
"""


class CrumbError(Exception):
    """Base for all crumbjar-specific errors."""


class ConfigurationError(CrumbError):
    """Raised when cookie or jar configuration is invalid.

    Typically raised while building a cookie from malformed options
    (a non-string prefix, an empty name, an unknown option).
    """


class EncodingError(CrumbError):
    """An application value could not be serialized to a cookie value."""


class DecodingError(CrumbError):
    """A request cookie value could not be decrypted or decoded.

    Callers of ``Cookie.http_value()`` should treat this as
    "cookie tampered or unreadable", not as an absent cookie.
    """


class LifetimeTypeError(CrumbError, TypeError):
    """A lifetime is neither seconds, a textual expression, nor a datetime."""


class LifetimeParseError(CrumbError, ValueError):
    """A textual lifetime expression could not be resolved to a timestamp."""


ParseError = LifetimeParseError
