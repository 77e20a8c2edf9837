"""ArmorPage exception hierarchy.

Shared across the matcher, the pages middleware, the ASGI handler and the
navigation model so every module raises and catches the same types.
"""

from dataclasses import dataclass
from pathlib import Path


class ArmorPageError(Exception):
    """Base for all armorpage-specific errors."""


class ConfigurationError(ArmorPageError):
    """Raised when configuration is invalid or an optional dependency is missing.

    Typically raised at construction time (``PagesConfig``) or when the
    dev server starts.
    """


class RenderError(ArmorPageError):
    """A page or layout file could not be read while composing a response.

    Always chained to the underlying ``OSError``.  The pages middleware
    re-raises it so the ASGI handler answers with a 500; partial HTML is
    never served.
    """

    def __init__(self, path: str | Path, detail: str = "") -> None:
        self.path = Path(path)
        message = f"Cannot read route file {self.path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class HTTPError(ArmorPageError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and turns them into a plain response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
