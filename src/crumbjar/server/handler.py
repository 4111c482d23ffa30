"""ASGI handler — translates ASGI scope/messages to crumbjar types.

The only component that touches raw ASGI directly. Converts the scope
to a typed Request, dispatches through middleware to the endpoint, and
sends the Response back through ASGI send().
"""

import inspect
import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from crumbjar._internal.asgi import Receive, Scope, Send
from crumbjar.context import request_var
from crumbjar.http.request import Request
from crumbjar.http.response import Response
from crumbjar.middleware.protocol import AnyResponse, Next
from crumbjar.server.sender import send_response

logger = logging.getLogger("crumbjar.server")


async def handle_request(
    scope: Scope,
    receive: Receive,  # noqa: ARG001 (bodies are never read)
    send: Send,
    *,
    endpoint: Callable[[Request], Any],
    middleware: tuple[Callable[..., Any], ...] = (),
) -> None:
    """Process a single HTTP request through the middleware pipeline.

    *endpoint* may be sync or async and may return a ``Response`` or a
    string body.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    token: Token[Request] = request_var.set(request)

    try:

        async def dispatch(req: Request) -> AnyResponse:
            result = endpoint(req)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, Response):
                return result
            return Response(body=result)

        # Wrap middleware around the dispatch
        handler: Next = dispatch
        for mw in reversed(middleware):

            async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> AnyResponse:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)
    except Exception:
        logger.exception("500 %s %s", request.method, request.path)
        response = Response(body="Internal Server Error", status=500, content_type="text/plain")
    finally:
        request_var.reset(token)

    await send_response(response, send)
