"""File-routed pages.

A routes directory maps to URLs: every directory is a path segment
(``[slug]`` becomes ``:slug``), ``=page.html`` is that path's content and
``=layout.html`` wraps every page below it at its ``<!--slot-->`` marker.

Public API:
    PagesMiddleware -- serve pages from a routes directory
    RouterScript -- serve the browser navigation script
    RouteCache -- scanned route snapshot with debounced rescans
    RoutesWatcher -- background file watcher feeding the cache
    scan_routes -- one walk over a routes directory
    get_layout_chain, render_document -- layout composition
"""

from armorpage.pages.cache import RouteCache, RescanScheduler, is_route_file
from armorpage.pages.discovery import LAYOUT_FILE, PAGE_FILE, scan_routes
from armorpage.pages.middleware import HEALTH_PATH, PagesMiddleware, RouterScript, health
from armorpage.pages.renderer import (
    ROUTER_SCRIPT_PATH,
    ROUTER_SCRIPT_TAG,
    get_layout_chain,
    render_document,
    render_page,
)
from armorpage.pages.types import LayoutChain, RouteSnapshot, ScanResult
from armorpage.pages.watcher import ChangeEvent, RoutesWatcher

__all__ = [
    "HEALTH_PATH",
    "LAYOUT_FILE",
    "PAGE_FILE",
    "ROUTER_SCRIPT_PATH",
    "ROUTER_SCRIPT_TAG",
    "ChangeEvent",
    "LayoutChain",
    "PagesMiddleware",
    "RescanScheduler",
    "RouteCache",
    "RouteSnapshot",
    "RouterScript",
    "RoutesWatcher",
    "ScanResult",
    "get_layout_chain",
    "health",
    "is_route_file",
    "render_document",
    "render_page",
    "scan_routes",
]
