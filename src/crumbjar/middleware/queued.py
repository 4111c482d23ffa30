"""Queued cookie middleware — flushes the jar onto the response.

Handlers decide cookies during the request (``jar.make(...).queue()``);
this middleware writes them out once the handler has returned, so the
decision and the ``Set-Cookie`` header are decoupled.
"""

from __future__ import annotations

import logging

from crumbjar.config import JarConfig
from crumbjar.context import request_var, use_jar
from crumbjar.http.request import Request
from crumbjar.jar import CookieJar
from crumbjar.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("crumbjar.server")


class QueuedCookiesMiddleware:
    """Bind a cookie jar per request and drain its queue into the response.

    Usage::

        from crumbjar import JarConfig, QueuedCookiesMiddleware, get_jar

        middleware = (QueuedCookiesMiddleware(config=JarConfig(lifetime=3600)),)

        async def handler(request):
            get_jar().make("theme", value="dark").queue()
            return Response("ok")

    With no *jar*, a fresh ``CookieJar(config)`` is created for every
    request. Passing a *jar* shares it across requests; only do that
    when requests are handled one at a time.
    """

    __slots__ = ("_config", "_jar")

    def __init__(self, jar: CookieJar | None = None, *, config: JarConfig | None = None) -> None:
        self._jar = jar
        self._config = config or JarConfig()

    def _jar_for_request(self) -> CookieJar:
        if self._jar is not None:
            return self._jar
        return CookieJar(self._config)

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Dispatch with a bound jar, then attach every queued cookie."""
        jar = self._jar_for_request()
        token = request_var.set(request)
        try:
            with use_jar(jar):
                response = await next(request)
        finally:
            request_var.reset(token)

        # Drained exactly once, after the handler is done with the jar
        queued = jar.fetch_queued()
        for cookie in queued:
            response = response.with_set_cookie(cookie.to_set_cookie())
        if queued:
            logger.debug(
                "%s %s: attached %d cookie(s)", request.method, request.path, len(queued)
            )
        return response
