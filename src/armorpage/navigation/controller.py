"""Navigation state machine.

``NavigationController`` is the Python rendition of the browser router:
it owns the navigation token, the single in-flight fetch (an
``anyio.CancelScope``) and the current ``NavState``.  Every navigation
bumps the token and cancels the previous fetch before issuing its own;
a fetch that completes after a newer navigation started is discarded
without touching the document or the history.

Usage::

    controller = NavigationController(Document(url="http://testserver/"), fetch)
    state = await controller.navigate("/blog/hello")
    assert state is NavState.APPLIED
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urljoin, urlsplit, urlunsplit

import anyio

from armorpage._internal.invoke import invoke
from armorpage.navigation.document import Document

logger = logging.getLogger("armorpage.navigation")

NAVIGATE_EVENT = "armorpage:navigate"

_DEFAULT_PORTS = {"http": ":80", "https": ":443"}


def normalize_url(url: str) -> str:
    """Canonical form of an absolute URL, as the browser reports ``href``.

    Scheme and host are lower-cased, a default port is dropped and an
    empty path becomes ``/``.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    userinfo, at, host = parts.netloc.rpartition("@")
    host = host.lower()
    if default_port := _DEFAULT_PORTS.get(scheme):
        host = host.removesuffix(default_port)
    path = parts.path or ("/" if host else "")
    return urlunsplit((scheme, f"{userinfo}{at}{host}", path, parts.query, parts.fragment))


class NavState(StrEnum):
    IDLE = "idle"
    NAVIGATING = "navigating"
    APPLIED = "applied"
    ABORTED = "aborted"
    FAILED_FALLBACK = "failed-fallback"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """What a fetch produced: status, body text and the final URL."""

    status: int
    text: str
    url: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


type Fetch = Callable[[str], Awaitable[FetchResult]]


class History:
    """Session history: a list of URLs and a cursor."""

    __slots__ = ("_entries", "_index")

    def __init__(self, initial: str | None = None) -> None:
        self._entries: list[str] = [initial] if initial else []
        self._index = len(self._entries) - 1

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    @property
    def current(self) -> str | None:
        if self._index < 0:
            return None
        return self._entries[self._index]

    def push(self, url: str) -> None:
        """Add *url* after the cursor, dropping any forward entries."""
        del self._entries[self._index + 1 :]
        self._entries.append(url)
        self._index = len(self._entries) - 1

    def back(self) -> str | None:
        if self._index <= 0:
            return None
        self._index -= 1
        return self._entries[self._index]

    def forward(self) -> str | None:
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        return self._entries[self._index]


class NavigationController:
    """Drives SPA navigations against a ``Document``.

    Args:
        document: Page to patch; ``document.url`` is the current location.
        fetch: ``async (url) -> FetchResult``.
        history: Session history; a fresh one starting at
            ``document.url`` when omitted.
        on_fallback: Called with the target URL when a navigation fails
            and the browser would do a full page load instead.
    """

    __slots__ = ("_document", "_fetch", "_history", "_on_fallback", "_scope", "_state", "_token")

    def __init__(
        self,
        document: Document,
        fetch: Fetch,
        *,
        history: History | None = None,
        on_fallback: Callable[[str], object] | None = None,
    ) -> None:
        self._document = document
        self._fetch = fetch
        self._history = history if history is not None else History(document.url or None)
        self._on_fallback = on_fallback
        self._scope: anyio.CancelScope | None = None
        self._state = NavState.IDLE
        self._token = 0

    @property
    def document(self) -> Document:
        return self._document

    @property
    def history(self) -> History:
        return self._history

    @property
    def state(self) -> NavState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    @property
    def in_flight(self) -> bool:
        """Whether a fetch is currently outstanding."""
        return self._scope is not None

    def cancel(self) -> None:
        """Cancel the outstanding fetch, if any."""
        if self._scope is not None:
            self._scope.cancel()
            self._scope = None

    async def navigate(self, url: str, push: bool = True) -> NavState:
        """Navigate to *url* and return how this navigation ended.

        The returned state belongs to this call.  ``controller.state``
        always reflects the most recent navigation, so a superseded call
        returns ``ABORTED`` without changing it.
        """
        target = normalize_url(urljoin(self._document.url, url))

        self._token += 1
        token = self._token
        self.cancel()

        if push and target == normalize_url(self._document.url):
            self._document.scroll_y = 0
            self._document.dispatch(NAVIGATE_EVENT, {"url": target})
            self._state = NavState.APPLIED
            return self._state

        scope = anyio.CancelScope()
        self._scope = scope
        self._state = NavState.NAVIGATING

        result: FetchResult | None = None
        error: Exception | None = None
        with scope:
            try:
                result = await self._fetch(target)
            except Exception as exc:
                error = exc

        if self._scope is scope:
            self._scope = None

        if token != self._token:
            logger.debug("Discarded stale navigation to %s", target)
            return NavState.ABORTED
        if scope.cancelled_caught:
            self._state = NavState.ABORTED
            return self._state

        if error is not None or result is None or not result.ok:
            return await self._fall_back(target, result, error)

        if push:
            self._history.push(target)
        self._document.url = target
        self._document.apply(Document.parse(result.text, url=target))
        self._document.scroll_y = 0
        self._document.dispatch(NAVIGATE_EVENT, {"url": target})
        self._state = NavState.APPLIED
        return self._state

    async def reload(self) -> NavState:
        """Re-fetch the current URL without adding a history entry."""
        return await self.navigate(self._document.url, push=False)

    async def pop(self, url: str) -> NavState:
        """Handle a back/forward move to *url* (no history push)."""
        return await self.navigate(url, push=False)

    async def back(self) -> NavState | None:
        """Move back in history and navigate there, if possible."""
        url = self._history.back()
        if url is None:
            return None
        return await self.pop(url)

    async def forward(self) -> NavState | None:
        """Move forward in history and navigate there, if possible."""
        url = self._history.forward()
        if url is None:
            return None
        return await self.pop(url)

    async def _fall_back(
        self,
        target: str,
        result: FetchResult | None,
        error: Exception | None,
    ) -> NavState:
        reason = f"HTTP {result.status}" if result is not None else repr(error)
        logger.warning("Navigation to %s failed (%s); falling back to full load", target, reason)
        self._state = NavState.FAILED_FALLBACK
        if self._on_fallback is not None:
            await invoke(self._on_fallback, target)
        return self._state
