"""Request boundary for file-routed pages.

``PagesMiddleware`` answers GET requests whose path matches a page in the
routes directory with the composed HTML document.  Every other request,
and every path without a page, goes to the next handler unchanged.

``RouterScript`` serves the browser navigation script that rendered
pages reference, and ``health`` is the dev server's liveness endpoint.
"""

from __future__ import annotations

import logging
from importlib import resources

from armorpage.config import PagesConfig
from armorpage.http.request import Request
from armorpage.http.response import Response
from armorpage.middleware.protocol import Next
from armorpage.pages.cache import RouteCache
from armorpage.pages.renderer import ROUTER_SCRIPT_PATH, get_layout_chain, render_document
from armorpage.pages.watcher import RoutesWatcher

logger = logging.getLogger("armorpage.pages")

HEALTH_PATH = "/_armorpage/health"
SCRIPT_CONTENT_TYPE = "text/javascript; charset=utf-8"


class PagesMiddleware:
    """Middleware that renders ``=page.html`` routes with their layouts.

    Usage::

        pages = PagesMiddleware(PagesConfig(routes_dir="./routes", watch=True))
        app.add_middleware(pages)
        ...
        pages.close()

    Args:
        config: Pages options; defaults to ``PagesConfig()``.
        cache: Pre-built cache to use instead of one built from *config*.
    """

    __slots__ = ("_cache", "_config", "_watcher")

    def __init__(self, config: PagesConfig | None = None, *, cache: RouteCache | None = None) -> None:
        self._config = config or PagesConfig()
        self._cache = cache or RouteCache(
            self._config.routes_root,
            mode=self._config.cache_mode,
            debounce=self._config.debounce,
            rescan_interval=self._config.rescan_interval,
        )
        self._watcher: RoutesWatcher | None = None

    @property
    def config(self) -> PagesConfig:
        return self._config

    @property
    def cache(self) -> RouteCache:
        return self._cache

    @property
    def watcher(self) -> RoutesWatcher | None:
        return self._watcher

    def ensure_watcher(self) -> RoutesWatcher | None:
        """Start the file watcher once, if watching is enabled.

        Returns ``None`` when watching is off or the routes directory
        does not exist yet.
        """
        if not self._config.watch:
            return None
        if self._watcher is not None:
            return self._watcher
        if not self._cache.root.is_dir():
            return None

        watcher = RoutesWatcher(self._cache.root, self._cache.notify)
        try:
            watcher.start()
        except Exception:
            logger.exception("routes watcher error")
            return None
        self._watcher = watcher
        return watcher

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method != "GET":
            return await next(request)

        self.ensure_watcher()

        snapshot = self._cache.load()
        if snapshot is None:
            if self._config.log:
                logger.error("Routes directory not found: %s", self._cache.root)
            return await next(request)

        match = snapshot.router.match(request.raw_path)
        if match is None:
            return await next(request)

        request = request.with_path_params(match.params)
        chain = get_layout_chain(match.pattern, snapshot.layouts)
        try:
            html = render_document(chain, match.target, snapshot.root)
        except Exception:
            if self._config.log:
                logger.exception("Page render error: %s %s", request.method, request.path)
            raise

        return Response(body=html)

    def close(self) -> None:
        """Stop the watcher and drop any pending rescan."""
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        self._cache.close()


def load_router_script() -> str:
    """Text of the packaged browser navigation script."""
    return (
        resources.files("armorpage.pages")
        .joinpath("static/router.js")
        .read_text(encoding="utf-8")
    )


class RouterScript:
    """Middleware serving ``/_armorpage/router.js``.

    The script is read from package data once, on first request.
    """

    __slots__ = ("_path", "_source")

    def __init__(self, path: str = ROUTER_SCRIPT_PATH) -> None:
        self._path = path
        self._source: str | None = None

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.path != self._path or request.method not in ("GET", "HEAD"):
            return await next(request)
        if self._source is None:
            self._source = load_router_script()
        return Response(body=self._source, content_type=SCRIPT_CONTENT_TYPE).with_header(
            "Cache-Control", "no-cache"
        )


def health() -> dict[str, bool]:
    """Liveness probe for ``GET /_armorpage/health``."""
    return {"ok": True}
