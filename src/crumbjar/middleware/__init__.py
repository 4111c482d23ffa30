"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    QueuedCookiesMiddleware -- Per-request cookie jar, queued cookies flushed to the response
"""

from crumbjar.middleware.protocol import AnyResponse, Middleware, Next
from crumbjar.middleware.queued import QueuedCookiesMiddleware

__all__ = [
    "AnyResponse",
    "Middleware",
    "Next",
    "QueuedCookiesMiddleware",
]
