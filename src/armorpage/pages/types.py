"""Data models for file-routed pages.

Immutable frozen dataclasses built once per scan.  A ``RouteSnapshot``
is published as a whole and never mutated; a rescan builds a new one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from armorpage.routing.route import RoutePattern
from armorpage.routing.router import Router


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Output of one walk over the routes directory.

    Attributes:
        routes: URL pattern -> page file (``=page.html``).
        layouts: URL prefix -> layout file (``=layout.html``).
            The root layout lives under ``"/"``.
    """

    routes: Mapping[str, Path] = field(default_factory=dict)
    layouts: Mapping[str, Path] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LayoutChain:
    """Layout files wrapping a page, ordered root (outermost) to leaf.

    An empty chain is valid: the page is served as-is.
    """

    layouts: tuple[Path, ...] = ()

    def __len__(self) -> int:
        return len(self.layouts)

    def __iter__(self):
        return iter(self.layouts)


@dataclass(frozen=True, slots=True)
class RouteSnapshot:
    """Everything a request needs from one scan of the routes directory.

    Attributes:
        root: Absolute routes directory the snapshot was built from.
        routes: Read-only URL pattern -> page file mapping.
        layouts: Read-only URL prefix -> layout file mapping.
        router: Compiled matcher over ``routes``.
        scanned_at: ``time.monotonic()`` when the scan finished.
    """

    root: Path
    routes: Mapping[str, Path]
    layouts: Mapping[str, Path]
    router: Router[Path]
    scanned_at: float = 0.0

    @classmethod
    def build(cls, root: Path, scanned: ScanResult, *, scanned_at: float = 0.0) -> RouteSnapshot:
        """Freeze a scan into a publishable snapshot."""
        routes = MappingProxyType(dict(scanned.routes))
        return cls(
            root=root,
            routes=routes,
            layouts=MappingProxyType(dict(scanned.layouts)),
            router=Router(routes),
            scanned_at=scanned_at,
        )

    @property
    def dynamic_patterns(self) -> tuple[RoutePattern, ...]:
        """Dynamic route patterns in match order."""
        return self.router.dynamic_patterns
