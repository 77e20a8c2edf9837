"""The request object handed to middleware and route handlers.

Everything read from the ASGI scope is frozen.  The body is read lazily
and at most once.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from armorpage._internal.types import Receive, Scope
from armorpage.http.mappings import Headers, QueryParams


@dataclass(slots=True)
class _BodyCache:
    data: bytes | None = None


@dataclass(frozen=True, slots=True)
class Request:
    """An inbound HTTP request.

    ``path`` is percent-decoded, as ASGI servers deliver it; ``raw_path``
    is the path exactly as sent, which route matching uses so that
    parameters bind undecoded and an escaped ``%2F`` stays inside one
    segment.  ``path_params`` starts empty and is filled by whichever
    layer matched the path (an app route or a page route).
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    path_params: Mapping[str, str] = field(default_factory=dict)
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    _receive: Receive | None = field(default=None, repr=False, compare=False)
    _body: _BodyCache = field(default_factory=_BodyCache, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        server = scope.get("server")
        client = scope.get("client")
        raw_path = scope.get("raw_path")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            raw_path=raw_path.decode("latin-1").partition("?")[0] if raw_path else scope["path"],
            headers=Headers.from_raw(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            server=(server[0], server[1]) if server else None,
            client=(client[0], client[1]) if client else None,
            _receive=receive,
        )

    @property
    def url(self) -> str:
        """Path plus query string, as requested."""
        if not self.query.raw:
            return self.path
        return f"{self.path}?{self.query.raw.decode('latin-1')}"

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """Copy of this request with *params* merged over ``path_params``.

        The copy shares the body cache, so the body can still be read
        once from either object.
        """
        return replace(self, path_params={**self.path_params, **params})

    async def stream(self) -> AsyncIterator[bytes]:
        if self._receive is None:
            return
        more_body = True
        while more_body:
            message: dict[str, Any] = await self._receive()
            if chunk := message.get("body", b""):
                yield chunk
            more_body = message.get("more_body", False)

    async def body(self) -> bytes:
        if self._body.data is None:
            self._body.data = b"".join([chunk async for chunk in self.stream()])
        return self._body.data

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")
