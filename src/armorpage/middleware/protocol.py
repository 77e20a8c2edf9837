"""The middleware calling convention.

Middleware wraps the rest of the pipeline.  It receives the request and
a ``next`` callable, and either answers itself or awaits ``next``::

    async def server_timing(request: Request, next: Next) -> Response:
        start = time.perf_counter()
        response = await next(request)
        return response.with_header("Server-Timing", f"app;dur={time.perf_counter() - start:.1f}")
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from armorpage.http.request import Request
from armorpage.http.response import Response

type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Structural type for middleware: plain async functions and objects
    with an async ``__call__`` (``StaticFiles``, ``PagesMiddleware``) both fit.
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
