"""HTTP request pipeline.

Builds a ``Request`` from the scope, runs it through the middleware
chain with app route dispatch at the bottom, maps exceptions to error
responses and sends the result.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from armorpage._internal.invoke import invoke
from armorpage._internal.types import Handler, Receive, Scope, Send
from armorpage.errors import HTTPError, MethodNotAllowed, NotFound
from armorpage.http.request import Request
from armorpage.http.response import Response
from armorpage.middleware.protocol import Next
from armorpage.routing.router import Router
from armorpage.server.errors import handle_http_error, handle_internal_error
from armorpage.server.negotiation import negotiate
from armorpage.server.sender import send_response

type MethodTable = Mapping[str, Handler]


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router[MethodTable],
    middleware: tuple[Callable[..., Any], ...],
    debug: bool = False,
) -> None:
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    try:
        response = await build_chain(router, middleware)(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send, method=request.method)


def build_chain(router: Router[MethodTable], middleware: tuple[Callable[..., Any], ...]) -> Next:
    """Compose *middleware* around route dispatch; the first entry runs first."""

    async def dispatch(request: Request) -> Response:
        return await _dispatch_route(router, request)

    chain: Next = dispatch
    for mw in reversed(middleware):
        chain = _link(mw, chain)
    return chain


def _link(mw: Callable[..., Any], inner: Next) -> Next:
    async def call(request: Request) -> Response:
        return await mw(request, inner)

    return call


async def _dispatch_route(router: Router[MethodTable], request: Request) -> Response:
    """Call the app route handler registered for the path and method.

    Raises:
        NotFound: No route pattern matches the path.
        MethodNotAllowed: The path matches, the method does not.
    """
    match = router.match(request.raw_path)
    if match is None:
        raise NotFound(f"No route for {request.path}")

    methods = match.target
    handler = methods.get(request.method)
    if handler is None and request.method == "HEAD":
        handler = methods.get("GET")
    if handler is None:
        raise MethodNotAllowed(frozenset(methods))

    request = request.with_path_params(match.params)
    result = await invoke(handler, **_bind_arguments(handler, request))
    return negotiate(result)


def _bind_arguments(handler: Handler, request: Request) -> dict[str, Any]:
    """Keyword arguments for *handler*.

    A parameter named ``request`` (or annotated ``Request``) gets the
    request; a parameter named after a path parameter gets its value,
    converted with the annotation when that conversion succeeds.
    """
    arguments: dict[str, Any] = {}
    for name, param in inspect.signature(handler, eval_str=True).parameters.items():
        if name == "request" or param.annotation is Request:
            arguments[name] = request
            continue
        if name not in request.path_params:
            continue
        raw = request.path_params[name]
        arguments[name] = _convert(raw, param.annotation)
    return arguments


def _convert(raw: str, annotation: Any) -> Any:
    if annotation is inspect.Parameter.empty:
        return raw
    try:
        return annotation(raw)
    except (TypeError, ValueError):
        return raw
