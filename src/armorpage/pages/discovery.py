"""Filesystem route discovery for the routes directory.

Walks the routes tree and records:

- ``=page.html`` files as the page of their directory's URL
- ``=layout.html`` files as the layout for their directory's URL prefix

Directory names wrapped in ``[brackets]`` become ``:param`` segments::

    routes/
      =layout.html            # layout for "/"
      =page.html              # GET /
      blog/
        =layout.html          # layout for "/blog"
        [slug]/
          =page.html          # GET /blog/:slug
"""

from __future__ import annotations

from pathlib import Path

from armorpage.pages.types import ScanResult

PAGE_FILE = "=page.html"
LAYOUT_FILE = "=layout.html"


def directory_segment(name: str) -> str:
    """Map a directory name to its URL segment (``[slug]`` -> ``:slug``)."""
    if len(name) > 2 and name.startswith("[") and name.endswith("]"):
        return ":" + name[1:-1]
    return name


def scan_routes(routes_dir: str | Path) -> ScanResult:
    """Walk *routes_dir* and map URLs to page and layout files.

    Pure read: nothing is cached or mutated outside the returned result.

    Raises:
        FileNotFoundError: If *routes_dir* is not a directory.  Callers
            that treat a missing directory as "no routes" check first.
    """
    root = Path(routes_dir).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Routes directory not found: {root}")

    routes: dict[str, Path] = {}
    layouts: dict[str, Path] = {}
    _walk_directory(root, "", routes=routes, layouts=layouts)
    return ScanResult(routes=routes, layouts=layouts)


def _walk_directory(
    directory: Path,
    url_path: str,
    *,
    routes: dict[str, Path],
    layouts: dict[str, Path],
) -> None:
    """Recursively collect pages and layouts below *directory*."""
    for item in sorted(directory.iterdir()):
        if item.is_dir():
            _walk_directory(
                item,
                f"{url_path}/{directory_segment(item.name)}",
                routes=routes,
                layouts=layouts,
            )
        elif item.name == PAGE_FILE:
            routes[url_path or "/"] = item
        elif item.name == LAYOUT_FILE:
            layouts[url_path or "/"] = item
