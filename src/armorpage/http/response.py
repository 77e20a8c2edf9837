"""Outbound HTTP response.

Responses are frozen; the ``with_*`` methods return modified copies so
middleware can decorate a response without touching the original.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """Body, status, content type and extra headers.

    ``content_type`` is sent as its own header; ``headers`` holds the
    rest in order, duplicates allowed.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def json(cls, data: Any, *, status: int = 200) -> Response:
        """Build an ``application/json`` response from *data*."""
        return cls(
            body=json_module.dumps(data),
            status=status,
            content_type="application/json",
        )

    def with_status(self, status: int) -> Response:
        """Copy with *status*."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Copy with one more header appended."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Copy with every item of *headers* appended."""
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> Response:
        """Copy with *content_type*."""
        return replace(self, content_type=content_type)

    def header(self, name: str) -> str | None:
        """Return the first header value named *name* (case-insensitive)."""
        name_lower = name.lower()
        for key, value in self.headers:
            if key.lower() == name_lower:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        """Body encoded as UTF-8 when it is text."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body decoded as UTF-8 when it is bytes."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body
