"""Type aliases for the ASGI boundary and user callables."""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

type Scope = MutableMapping[str, Any]
type Message = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[Message]]
type Send = Callable[[Message], Awaitable[None]]

# App route handlers take any signature; see server.handler for binding.
type Handler = Callable[..., Any]
