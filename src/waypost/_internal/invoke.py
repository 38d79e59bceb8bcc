"""Invoke helpers — call sync or async services uniformly.

Services registered with the gateway can be ``def`` or ``async def``.

Usage::

    from waypost._internal.invoke import invoke

    result = await invoke(service, params)
"""

import inspect
from typing import Any


async def invoke(service: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a service and await the result if it's awaitable."""
    result = service(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
