"""Development server.

Assembles the dev app (public files, router script, watched pages,
health probe) and serves it with a pounce ASGI server.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from armorpage.config import AppConfig, PagesConfig
from armorpage.errors import ConfigurationError

if TYPE_CHECKING:
    from armorpage.app import App

logger = logging.getLogger("armorpage.server")


def create_dev_app(
    routes_dir: str | Path = "./routes",
    *,
    config: AppConfig | None = None,
    watch: bool = True,
) -> App:
    """Build the app served by ``armorpage dev``.

    Pipeline order: ``StaticFiles`` for the public directory, the router
    script endpoint, the pages middleware, then the app routes
    (``/_armorpage/health``).
    """
    from armorpage.app import App
    from armorpage.middleware.static import StaticFiles
    from armorpage.pages.middleware import HEALTH_PATH, health

    app = App(config)
    if app.config.public_dir is not None:
        app.add_middleware(StaticFiles(app.config.public_dir, prefix=app.config.public_url))
    app.mount_pages(PagesConfig(routes_dir=routes_dir, watch=watch))
    app.route(HEALTH_PATH)(health)
    return app


def run_dev_server(app: object, host: str, port: int) -> None:
    """Start a pounce dev server with the given App.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
    but the dev server has a live ``App`` object, so ``pounce.Server`` is
    used directly with the ASGI callable.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "The dev server requires pounce (Python 3.14+). "
            "Install it with: pip install bengal-pounce"
        )
        raise ConfigurationError(msg) from exc

    logger.info("Serving on http://%s:%d", host, port)
    config = ServerConfig(host=host, port=port, workers=1)
    server = Server(config, app)
    server.run()
