import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func*, awaiting the result when it is awaitable.

    Used for route handlers, lifecycle hooks and navigation fallbacks,
    all of which may be plain or ``async`` functions.
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result
