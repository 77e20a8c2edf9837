"""Static file serving middleware.

Serves files from a directory under a URL prefix, the way the dev
server mounts ``./public`` at ``/public``.  Falls through to the next
handler for non-matching paths and missing files.
"""

import mimetypes
from pathlib import Path

from armorpage.http.request import Request
from armorpage.http.response import Response
from armorpage.middleware.protocol import Next


class StaticFiles:
    """Middleware that serves static files from a directory.

    Security: resolves symlinks and verifies the final path is within
    the configured directory to prevent path traversal.

    Usage::

        app.add_middleware(StaticFiles(directory="./public", prefix="/public"))
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/public",
        *,
        index: str = "index.html",
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

        # Root prefix "/" normalizes to "" so every path is a candidate.
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.path
        if self._prefix:
            if not path.startswith(self._prefix + "/") and path != self._prefix:
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403)

        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                return await next(request)
            if not path.endswith("/"):
                return Response(body="", status=301).with_header("Location", path + "/")
            file_path = index_path

        if not file_path.is_file():
            return await next(request)

        return self._serve_file(file_path)

    def _serve_file(self, file_path: Path) -> Response:
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"

        body = file_path.read_bytes()
        return (
            Response(body=body, content_type=content_type)
            .with_header("Content-Length", str(len(body)))
            .with_header("Cache-Control", self._cache_control)
        )
