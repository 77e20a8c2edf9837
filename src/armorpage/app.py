"""The application object.

An ``App`` collects app routes, middleware, mounted pages and lifecycle
hooks, then compiles them once into a router plus middleware tuple the
first time it serves (``startup()``, ``run()`` or an ASGI call).
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from armorpage._internal.invoke import invoke
from armorpage._internal.types import Handler, Receive, Scope, Send
from armorpage.config import AppConfig, PagesConfig
from armorpage.middleware.protocol import Middleware
from armorpage.pages.middleware import PagesMiddleware, RouterScript
from armorpage.routing.router import Router
from armorpage.server.handler import handle_request


@dataclass(slots=True)
class _PendingRoute:
    """Registered with ``route()``; compiled by ``_freeze()``."""

    path: str
    handler: Handler
    methods: list[str] | None


class App:
    """The armorpage application.

    Usage::

        app = App()
        app.mount_pages(PagesConfig(routes_dir="./routes", watch=True))

        @app.route("/api/items/:id")
        def item(id: int):
            return {"id": id}

    Registration methods raise ``RuntimeError`` once the app is compiled.
    Compilation happens under a lock so concurrent first requests build
    the router exactly once.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pages",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._pages: list[PagesMiddleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Set by _freeze()
        self._router: Router[dict[str, Handler]] | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator registering *func* for *path* (``:name`` segments bind
        parameters) and *methods* (``GET`` when omitted).
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods))
            return func

        return decorator

    def add_middleware(self, middleware: Middleware) -> None:
        """Append *middleware*; it runs after everything added before it."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def mount_pages(self, pages: PagesConfig | str | Path | None = None) -> PagesMiddleware:
        """Serve file-routed pages from a routes directory.

        Adds the router script endpoint and a ``PagesMiddleware`` to the
        pipeline, and closes the middleware on shutdown.  Accepts a
        ``PagesConfig`` or just the routes directory.
        """
        self._check_not_frozen()
        if pages is None or isinstance(pages, (str, Path)):
            config = PagesConfig() if pages is None else PagesConfig(routes_dir=pages)
        else:
            config = pages

        middleware = PagesMiddleware(config)
        self._middleware_list.append(RouterScript())
        self._middleware_list.append(middleware)
        self._pages.append(middleware)
        self._shutdown_hooks.append(middleware.close)
        return middleware

    @property
    def pages(self) -> tuple[PagesMiddleware, ...]:
        """Pages middleware mounted with ``mount_pages()``."""
        return tuple(self._pages)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator for a sync or async hook run by ``startup()``."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator for a sync or async hook run by ``shutdown()``."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and serve it with the pounce dev server."""
        from armorpage.server.dev import run_dev_server

        self._ensure_frozen()
        run_dev_server(self, host or self.config.host, port or self.config.port)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            debug=self.config.debug,
        )

    async def startup(self) -> None:
        """Freeze the app and run startup hooks in registration order."""
        self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            kind = message["type"]
            if kind == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif kind == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        # Caller holds _freeze_lock.
        table: dict[str, dict[str, Handler]] = {}
        for pending in self._pending_routes:
            methods = table.setdefault(pending.path, {})
            for method in pending.methods or ["GET"]:
                methods[method.upper()] = pending.handler
        self._router = Router(table)
        self._middleware = tuple(self._middleware_list)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving. "
                "Register routes, middleware and pages before the first request."
            )
            raise RuntimeError(msg)
