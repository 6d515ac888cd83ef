"""Helpers for calling hooks that may or may not be coroutines."""

from __future__ import annotations

import inspect
from typing import Any, AsyncIterator, Iterable, Union


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def iterate(source: Union[Iterable[Any], AsyncIterator[Any]]) -> AsyncIterator[Any]:
    """Yield items from a synchronous or asynchronous iterable, one at a time."""
    if hasattr(source, "__aiter__"):
        async for item in source:
            yield item
    else:
        for item in source:
            yield item
