"""RoutePattern, Segment and RouteMatch frozen dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Segment:
    """A parsed segment of a route pattern.

    Literal:  ``blog``   (is_param=False)
    Param:    ``:slug``  (is_param=True, name="slug")
    """

    value: str
    is_param: bool = False

    @property
    def name(self) -> str | None:
        """Parameter name for placeholder segments, else ``None``."""
        return self.value[1:] if self.is_param else None


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A route pattern split into typed segments.

    The segment count is fixed: ``/blog/:slug`` only ever matches
    two-segment paths.
    """

    pattern: str
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, pattern: str) -> RoutePattern:
        """Parse ``/blog/:slug`` into literal and placeholder segments."""
        segments = tuple(
            Segment(value=part, is_param=part.startswith(":") and len(part) > 1)
            for part in pattern.split("/")
            if part
        )
        return cls(pattern=pattern, segments=segments)

    @property
    def dynamic_count(self) -> int:
        """Number of placeholder segments."""
        return sum(1 for seg in self.segments if seg.is_param)

    @property
    def static_count(self) -> int:
        """Number of literal segments."""
        return len(self.segments) - self.dynamic_count

    @property
    def is_dynamic(self) -> bool:
        return any(seg.is_param for seg in self.segments)

    def match(self, parts: list[str]) -> dict[str, str] | None:
        """Bind *parts* against this pattern.

        Returns the parameter mapping on a match, ``None`` otherwise.
        Values are the raw path segments; nothing is URL-decoded.
        """
        if len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for seg, part in zip(self.segments, parts, strict=True):
            if seg.is_param:
                params[seg.value[1:]] = part
            elif seg.value != part:
                return None
        return params


@dataclass(frozen=True, slots=True)
class RouteMatch(Generic[T]):
    """Result of a successful route match.

    Attributes:
        pattern: The matched route pattern string (e.g. ``/blog/:slug``).
        params: One entry per placeholder segment.
        target: Whatever the route table maps the pattern to
            (a page file path, a handler table, ...).
    """

    pattern: str
    params: dict[str, str]
    target: T
