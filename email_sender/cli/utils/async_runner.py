"""Bridge between synchronous click commands and the async senders."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

T = TypeVar("T")


def coro(f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """Run an ``async def`` click callback to completion with asyncio.run.

    Usage:
        @cli.command()
        @coro
        async def send(...):
            result = await sender.send_email(message)
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return asyncio.run(f(*args, **kwargs))

    return wrapper
