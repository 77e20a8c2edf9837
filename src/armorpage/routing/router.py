"""Specificity-ordered route matcher.

A ``Router`` is compiled once from a mapping of route patterns and never
mutated afterwards.  Matching is a pure function of the compiled table
and the request path:

1. An exact static hit always wins, with no parameters.
2. Otherwise the dynamic patterns are tried in specificity order and the
   first one whose segment count and literals agree is returned.
3. No hit returns ``None``; the caller falls through.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from armorpage.routing.route import RouteMatch, RoutePattern

T = TypeVar("T")


def normalize_path(path: str) -> str:
    """Drop one trailing slash, keeping the root as ``/``."""
    if path in ("", "/"):
        return "/"
    if path.endswith("/"):
        return path[:-1] or "/"
    return path


def split_path(path: str) -> list[str]:
    """Split a URL path into its non-empty segments."""
    return [part for part in path.split("/") if part]


def specificity_key(pattern: RoutePattern) -> tuple[int, int, int, str]:
    """Sort key ranking dynamic patterns from most to least specific.

    Fewer placeholders first, then more literal segments, then more
    segments overall, then the pattern string itself.
    """
    return (
        pattern.dynamic_count,
        -pattern.static_count,
        -len(pattern.segments),
        pattern.pattern,
    )


def sort_dynamic_patterns(patterns: Iterable[str | RoutePattern]) -> tuple[RoutePattern, ...]:
    """Parse and order *patterns* by ``specificity_key``."""
    parsed = [p if isinstance(p, RoutePattern) else RoutePattern.parse(p) for p in patterns]
    return tuple(sorted(parsed, key=specificity_key))


class Router(Generic[T]):
    """Compiled, immutable route table.

    Usage::

        router = Router({"/": "index", "/blog/:slug": "post"})
        match = router.match("/blog/hello")
        assert match.params == {"slug": "hello"}
    """

    __slots__ = ("_dynamic", "_routes")

    def __init__(self, routes: Mapping[str, T]) -> None:
        self._routes: dict[str, T] = dict(routes)
        self._dynamic: tuple[RoutePattern, ...] = sort_dynamic_patterns(
            p for p in (RoutePattern.parse(key) for key in self._routes) if p.is_dynamic
        )

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    @property
    def routes(self) -> Mapping[str, T]:
        """Pattern -> target, as registered."""
        return self._routes

    @property
    def dynamic_patterns(self) -> tuple[RoutePattern, ...]:
        """Dynamic patterns in the order they are tried."""
        return self._dynamic

    def match(self, path: str) -> RouteMatch[T] | None:
        """Find the best route for *path*, or ``None``."""
        url_path = normalize_path(path)

        if url_path in self._routes:
            return RouteMatch(pattern=url_path, params={}, target=self._routes[url_path])

        parts = split_path(url_path)
        for pattern in self._dynamic:
            params = pattern.match(parts)
            if params is not None:
                return RouteMatch(
                    pattern=pattern.pattern,
                    params=params,
                    target=self._routes[pattern.pattern],
                )
        return None
