"""Click interception rules for in-app links.

Mirrors the browser router's checks so server-side tests can ask the
same question the script asks on every click: should this navigation
stay in SPA mode, or be left to the browser?
"""

from dataclasses import dataclass
from urllib.parse import urljoin, urlsplit

NO_SPA_ATTR = "data-no-spa"
DOWNLOAD_ATTR = "download"


@dataclass(frozen=True, slots=True)
class Link:
    """An anchor element as the router sees it.

    Attributes:
        href: Raw ``href`` value, resolved against the current URL.
        target: ``target`` attribute (empty when absent).
        attributes: Names of boolean-ish attributes present on the
            anchor, e.g. ``data-no-spa`` or ``download``.
    """

    href: str
    target: str = ""
    attributes: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class Click:
    """A pointer click on a link."""

    button: int = 0
    meta: bool = False
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    default_prevented: bool = False

    @property
    def has_modifier(self) -> bool:
        return self.meta or self.ctrl or self.shift or self.alt


def _origin(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return parts.scheme.lower(), parts.netloc.lower()


def should_intercept(link: Link, current_url: str, click: Click | None = None) -> bool:
    """Whether a click on *link* should become an SPA navigation.

    Intercepted: plain left clicks on same-origin links that target the
    current window, carry no ``data-no-spa`` or ``download`` attribute,
    and are not a hash jump within the current page.
    """
    click = click or Click()
    if click.default_prevented or click.button != 0 or click.has_modifier:
        return False

    resolved = urljoin(current_url, link.href)
    if _origin(resolved) != _origin(current_url):
        return False
    if link.target and link.target != "_self":
        return False
    if NO_SPA_ATTR in link.attributes or DOWNLOAD_ATTR in link.attributes:
        return False

    target_parts = urlsplit(resolved)
    current_parts = urlsplit(current_url)
    same_path = (target_parts.path or "/") == (current_parts.path or "/")
    return not (same_path and target_parts.fragment)
