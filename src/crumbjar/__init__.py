"""Crumbjar — named, value-transformed HTTP cookies.

Builds ``Set-Cookie`` directives from application values (JSON encoding,
encryption, prefixing), reverses the transformation when reading the
request, and defers emission until the response is sent.

Basic usage::

    from crumbjar import CookieJar, JarConfig

    jar = CookieJar(JarConfig(lifetime=3600, salt="_v1"))
    jar.make("session", value={"uid": 42}, encrypted=True).queue()

    for cookie in jar.fetch_queued():
        print(cookie)  # session_v1=gAAAAA...; Expires=...; Max-Age=3600; ...

In an ASGI pipeline, ``QueuedCookiesMiddleware`` binds a jar per request
(reachable via ``get_jar()``) and flushes the queue onto the response.
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "Cookie",
    "CookieJar",
    "CookieOptions",
    "CrumbError",
    "DecodingError",
    "EncodingError",
    "JarConfig",
    "LifetimeParseError",
    "LifetimeTypeError",
    "QueuedCookiesMiddleware",
    "Request",
    "Response",
    "SetCookie",
    "get_jar",
    "get_request",
    "parse_bool",
    "use_jar",
]

_LAZY_IMPORTS: dict[str, str] = {
    "ConfigurationError": "crumbjar.errors",
    "Cookie": "crumbjar.cookie",
    "CookieJar": "crumbjar.jar",
    "CookieOptions": "crumbjar.config",
    "CrumbError": "crumbjar.errors",
    "DecodingError": "crumbjar.errors",
    "EncodingError": "crumbjar.errors",
    "JarConfig": "crumbjar.config",
    "LifetimeParseError": "crumbjar.errors",
    "LifetimeTypeError": "crumbjar.errors",
    "QueuedCookiesMiddleware": "crumbjar.middleware.queued",
    "Request": "crumbjar.http.request",
    "Response": "crumbjar.http.response",
    "SetCookie": "crumbjar.http.cookies",
    "get_jar": "crumbjar.context",
    "get_request": "crumbjar.context",
    "parse_bool": "crumbjar._internal.booleans",
    "use_jar": "crumbjar.context",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crumbjar`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
