"""A minimal page model for server-side navigation tests.

``Document`` holds the parts of a page the navigation controller
touches: title, head ``<meta>`` tags, body HTML, scroll position, the
log of scripts it re-executed and the events it dispatched.
``Document.apply()`` performs the same patch the browser router does
after a successful fetch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any

from armorpage.pages.renderer import ROUTER_MARKER_ATTR, ROUTER_SCRIPT_PATH

RELOAD_ATTR = "data-armorpage-reload"

_BODY_RE = re.compile(r"<body\b[^>]*>(.*)</body\s*>", re.IGNORECASE | re.DOTALL)
_HEAD_RE = re.compile(r"<head\b[^>]*>.*?</head\s*>", re.IGNORECASE | re.DOTALL)
_SHELL_RE = re.compile(r"<!doctype[^>]*>|</?html\b[^>]*>|</?body\b[^>]*>", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ScriptTag:
    """A ``<script>`` element found in a body."""

    attrs: tuple[tuple[str, str], ...] = ()
    code: str = ""

    def attr(self, name: str) -> str | None:
        for key, value in self.attrs:
            if key == name:
                return value
        return None

    def has_attr(self, name: str) -> bool:
        return any(key == name for key, _ in self.attrs)

    @property
    def src(self) -> str | None:
        return self.attr("src")

    @property
    def is_router(self) -> bool:
        """Whether this is the navigation script's own tag."""
        if self.has_attr(ROUTER_MARKER_ATTR):
            return True
        return ROUTER_SCRIPT_PATH in (self.src or "")

    @property
    def should_rerun(self) -> bool:
        """Inline scripts rerun; external ones only with ``data-armorpage-reload``."""
        if self.is_router:
            return False
        if self.src:
            return self.has_attr(RELOAD_ATTR)
        return True


@dataclass(frozen=True, slots=True)
class DispatchedEvent:
    name: str
    detail: dict[str, Any]


class _PageParser(HTMLParser):
    """Collects the title, head meta tags and body scripts of a page."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.title: str | None = None
        self.meta: list[dict[str, str]] = []
        self.scripts: list[ScriptTag] = []
        self._in_body = False
        self._in_title = False
        self._title_parts: list[str] = []
        self._script: list[tuple[str, str]] | None = None
        self._script_parts: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        values = [(key, value or "") for key, value in attrs]
        if tag == "body":
            self._in_body = True
        elif tag == "title" and self.title is None and not self._in_body:
            self._in_title = True
        elif tag == "meta" and not self._in_body:
            meta = dict(values)
            if "name" in meta or "property" in meta:
                self.meta.append(meta)
        elif tag == "script":
            self._script = values
            self._script_parts = []

    def handle_endtag(self, tag: str) -> None:
        if tag == "title" and self._in_title:
            self._in_title = False
            self.title = "".join(self._title_parts).strip()
        elif tag == "script" and self._script is not None:
            self.scripts.append(ScriptTag(tuple(self._script), "".join(self._script_parts)))
            self._script = None
        elif tag == "head":
            self._in_body = True

    def handle_data(self, data: str) -> None:
        if self._in_title:
            self._title_parts.append(data)
        elif self._script is not None:
            self._script_parts.append(data)


def extract_body(html: str) -> str:
    """Inner HTML of ``<body>``, or the page minus its head and shell tags."""
    match = _BODY_RE.search(html)
    if match:
        return match.group(1)
    return _SHELL_RE.sub("", _HEAD_RE.sub("", html)).strip()


def body_scripts(body: str) -> list[ScriptTag]:
    """Every ``<script>`` element in a body fragment, in document order."""
    parser = _PageParser()
    parser._in_body = True
    parser.feed(body)
    parser.close()
    return parser.scripts


def meta_key(meta: dict[str, str]) -> tuple[str, str] | None:
    """Merge key of a meta tag: its ``name``, else its ``property``."""
    if meta.get("name"):
        return ("name", meta["name"])
    if meta.get("property"):
        return ("property", meta["property"])
    return None


@dataclass(slots=True)
class Document:
    """The live page a navigation controller patches.

    Attributes:
        url: Current location.
        title: Document title.
        meta: Head ``<meta>`` tags with a ``name`` or ``property``, as
            attribute dicts in document order.
        body: Inner HTML of ``<body>``.
        scroll_y: Vertical scroll offset.
        executed: Scripts re-executed by ``apply()``, oldest first.
        events: Events dispatched on the window, oldest first.
    """

    url: str = ""
    title: str = ""
    meta: list[dict[str, str]] = field(default_factory=list)
    body: str = ""
    scroll_y: int = 0
    executed: list[ScriptTag] = field(default_factory=list)
    events: list[DispatchedEvent] = field(default_factory=list)

    @classmethod
    def parse(cls, html: str, url: str = "") -> Document:
        """Build a document from a full HTML page."""
        parser = _PageParser()
        parser.feed(html)
        parser.close()
        return cls(
            url=url,
            title=parser.title or "",
            meta=parser.meta,
            body=extract_body(html),
        )

    def find_meta(self, key: tuple[str, str]) -> dict[str, str] | None:
        for meta in self.meta:
            if meta_key(meta) == key:
                return meta
        return None

    def merge_meta(self, incoming: list[dict[str, str]]) -> None:
        """Update tags sharing a name/property, append the rest.

        Tags missing from *incoming* are kept.
        """
        for tag in incoming:
            key = meta_key(tag)
            if key is None:
                continue
            existing = self.find_meta(key)
            if existing is not None:
                existing.update(tag)
            else:
                self.meta.append(dict(tag))

    def apply(self, incoming: Document) -> tuple[ScriptTag, ...]:
        """Patch this document with a freshly fetched page.

        Replaces the title and body, merges meta tags and re-executes the
        body scripts that qualify.  Returns the scripts that ran.
        """
        self.title = incoming.title
        self.merge_meta(incoming.meta)
        self.body = incoming.body

        ran = tuple(script for script in body_scripts(self.body) if script.should_rerun)
        self.executed.extend(ran)
        return ran

    def dispatch(self, name: str, detail: dict[str, Any]) -> DispatchedEvent:
        event = DispatchedEvent(name, dict(detail))
        self.events.append(event)
        return event

    def events_named(self, name: str) -> list[DispatchedEvent]:
        return [event for event in self.events if event.name == name]
