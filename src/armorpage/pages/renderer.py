"""Layout chain resolution and literal HTML composition.

The renderer composes nested layouts inside-out: the page is read first,
then each layout from the deepest to the root wraps the accumulated
content at its ``<!--slot-->`` marker.  There is no templating language;
content is injected verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from armorpage.errors import RenderError
from armorpage.pages.types import LayoutChain
from armorpage.routing.router import split_path

SLOT_MARKER = "<!--slot-->"
BODY_CLOSE = "</body>"

ROUTER_SCRIPT_PATH = "/_armorpage/router.js"
ROUTER_MARKER_ATTR = "data-armorpage-router"
ROUTER_SCRIPT_TAG = f'<script src="{ROUTER_SCRIPT_PATH}" {ROUTER_MARKER_ATTR}></script>'


def get_layout_chain(pattern: str, layouts: Mapping[str, Path]) -> LayoutChain:
    """Collect the layouts wrapping *pattern*, root first.

    The root layout (``"/"``) comes first when present, then one entry per
    URL prefix of *pattern* that has its own layout::

        get_layout_chain("/blog/:slug", {"/": a, "/blog": b})  # (a, b)
    """
    chain: list[Path] = []
    if "/" in layouts:
        chain.append(layouts["/"])

    current = ""
    for segment in split_path(pattern):
        current += "/" + segment
        if current in layouts:
            chain.append(layouts[current])

    return LayoutChain(tuple(chain))


def insert_content(layout: str, content: str) -> str:
    """Place *content* into *layout*.

    Replaces the first ``<!--slot-->``; without one, inserts before the
    first ``</body>``; without that either, appends on a new line.
    """
    if SLOT_MARKER in layout:
        return layout.replace(SLOT_MARKER, content, 1)
    if BODY_CLOSE in layout:
        return layout.replace(BODY_CLOSE, f"{content}\n{BODY_CLOSE}", 1)
    return f"{layout}\n{content}"


def inject_before_body_end(html: str, snippet: str) -> str:
    """Insert *snippet* before the first ``</body>``, or append it."""
    if BODY_CLOSE in html:
        return html.replace(BODY_CLOSE, f"{snippet}\n{BODY_CLOSE}", 1)
    return f"{html}\n{snippet}"


def resolve_route_file(entry: str | Path | None, routes_root: Path) -> Path | None:
    """Resolve a route map entry against the routes root.

    Absolute paths are returned unchanged; empty entries give ``None``.
    """
    if not entry:
        return None
    path = Path(entry)
    if path.is_absolute():
        return path
    return (routes_root / path).resolve()


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RenderError(path, exc.strerror or str(exc)) from exc


def render_page(
    layout_chain: Iterable[str | Path | None],
    page_path: str | Path | None,
    routes_root: Path,
) -> str:
    """Read the page and wrap it in every layout, innermost first.

    Raises:
        ValueError: If *page_path* is empty, meaning the route table and
            the matcher disagree.
        RenderError: If the page or any layout cannot be read.
    """
    resolved_page = resolve_route_file(page_path, routes_root)
    if resolved_page is None:
        msg = "Missing page path"
        raise ValueError(msg)

    content = _read(resolved_page)

    for entry in reversed(tuple(layout_chain)):
        layout_path = resolve_route_file(entry, routes_root)
        if layout_path is None:
            continue
        content = insert_content(_read(layout_path), content)

    return content


def render_document(
    layout_chain: Iterable[str | Path | None],
    page_path: str | Path | None,
    routes_root: Path,
) -> str:
    """Compose the full response body: page, layouts, router script."""
    html = render_page(layout_chain, page_path, routes_root)
    return inject_before_body_end(html, ROUTER_SCRIPT_TAG)
