"""
Helpers for collaborators that may answer synchronously or asynchronously.
"""

import inspect
from typing import Any, Awaitable, TypeVar, Union

T = TypeVar('T')

MaybeAwaitable = Union[T, Awaitable[T]]


async def resolve(value: MaybeAwaitable[T]) -> T:
    """Await `value` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


async def call(func, *args: Any, **kwargs: Any) -> Any:
    """Call a sync or async function and return its resolved result."""
    return await resolve(func(*args, **kwargs))
