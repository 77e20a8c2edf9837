"""Writes a ``Response`` to the ASGI ``send`` channel."""

from armorpage._internal.types import Send
from armorpage.http.response import Response

# Statuses that never carry a body, on top of every 1xx.
_BODYLESS_STATUSES = frozenset({204, 304})


def encode_headers(response: Response, content_length: int) -> list[tuple[bytes, bytes]]:
    """Lower-cased latin-1 header pairs; ``content-length`` is always computed."""
    pairs = [("content-type", response.content_type)]
    pairs.extend(
        (name.lower(), value)
        for name, value in response.headers
        if name.lower() != "content-length"
    )
    pairs.append(("content-length", str(content_length)))
    return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    body = response.body_bytes
    headers = encode_headers(response, len(body))
    if method == "HEAD" or response.status < 200 or response.status in _BODYLESS_STATUSES:
        body = b""
    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": body})
