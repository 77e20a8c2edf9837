"""Read-only multi-valued mappings for request headers and query strings.

Indexing returns the first value sent for a key; ``get_list`` returns
every value in arrival order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qsl


class MultiValueView(Mapping[str, str]):
    __slots__ = ("_values",)

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        values: dict[str, list[str]] = {}
        for key, value in pairs:
            values.setdefault(self.normalize(key), []).append(value)
        self._values = values

    @staticmethod
    def normalize(key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        return self._values[self.normalize(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.normalize(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(self.normalize(key), ()))


class Headers(MultiValueView):
    """Request headers. Names compare case-insensitively."""

    __slots__ = ()

    @staticmethod
    def normalize(key: str) -> str:
        return key.lower()

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> Headers:
        """Decode ASGI ``(name, value)`` byte pairs."""
        return cls((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw)


class QueryParams(MultiValueView):
    """Parsed query string; blank values are kept."""

    __slots__ = ("raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True))
        self.raw = query_string
