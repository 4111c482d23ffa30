"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task/thread.
- ``jar_var``: The ``CookieJar`` bound to the current request.

Both are set by the handler pipeline and middleware and reset after
each request. Accessing either outside that scope raises
``LookupError`` — there is no hidden process-wide instance.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threads, so concurrent requests never see each other's jar.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

from crumbjar.http.request import Request

if TYPE_CHECKING:
    from crumbjar.jar import CookieJar

# -- Request context --

request_var: ContextVar[Request] = ContextVar("crumbjar_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


# -- Cookie jar context --

jar_var: ContextVar[CookieJar | None] = ContextVar("crumbjar_jar", default=None)


def get_jar() -> CookieJar:
    """Return the cookie jar bound to the current request.

    Raises ``LookupError`` if no jar has been bound, either by
    ``QueuedCookiesMiddleware`` or by ``use_jar()``.
    """
    jar = jar_var.get()
    if jar is None:
        msg = (
            "No active cookie jar. Ensure QueuedCookiesMiddleware is added "
            "to the pipeline, or bind one with use_jar()."
        )
        raise LookupError(msg)
    return jar


@contextmanager
def use_jar(jar: CookieJar) -> Iterator[CookieJar]:
    """Bind *jar* as the current cookie jar for the enclosed block::

        with use_jar(CookieJar(config)) as jar:
            jar.make("theme", value="dark").queue()
    """
    token = jar_var.set(jar)
    try:
        yield jar
    finally:
        jar_var.reset(token)
