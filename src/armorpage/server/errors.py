"""Plain-text error responses for the request pipeline."""

import logging
import traceback

from armorpage.errors import HTTPError
from armorpage.http.request import Request
from armorpage.http.response import Response

logger = logging.getLogger("armorpage.server")


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool = False) -> Response:
    """Response for an ``HTTPError`` raised by a handler or middleware."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, content_type="text/plain; charset=utf-8").with_status(
        exc.status
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Log *exc* with its traceback and answer 500.

    In debug mode the body is the formatted traceback.
    """
    logger.exception("500 %s %s", request.method, request.path)

    body = "Internal Server Error"
    if debug:
        body = "".join(traceback.format_exception(exc))
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
