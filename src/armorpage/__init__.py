"""ArmorPage: file-routed HTML pages with SPA navigation.

A directory of ``=page.html`` and ``=layout.html`` files becomes a site:
directories are URL segments (``[slug]`` is a parameter), layouts wrap
every page below them, and a small browser script turns in-app link
clicks into fetch-and-swap navigations.

Basic usage::

    from armorpage import App, PagesConfig

    app = App()
    app.mount_pages(PagesConfig(routes_dir="./routes", watch=True))
    app.run()

Or from the command line::

    armorpage dev --routes ./routes --port 3000
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ArmorPageError",
    "ConfigurationError",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "PagesConfig",
    "PagesMiddleware",
    "RenderError",
    "Request",
    "Response",
    "RouteCache",
    "Router",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import armorpage`` fast while providing a clean top-level API.
    """
    if name == "App":
        from armorpage.app import App

        return App

    if name in ("AppConfig", "PagesConfig"):
        from armorpage import config as _config

        return getattr(_config, name)

    if name == "Request":
        from armorpage.http.request import Request

        return Request

    if name == "Response":
        from armorpage.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from armorpage.middleware import protocol as _protocol

        return getattr(_protocol, name)

    if name in ("PagesMiddleware", "RouteCache"):
        from armorpage import pages as _pages

        return getattr(_pages, name)

    if name == "Router":
        from armorpage.routing.router import Router

        return Router

    if name in (
        "ArmorPageError",
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "RenderError",
    ):
        from armorpage import errors as _errors

        return getattr(_errors, name)

    msg = f"module 'armorpage' has no attribute {name!r}"
    raise AttributeError(msg)
