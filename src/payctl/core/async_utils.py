"""Async helpers for driving coroutines from click commands."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from payctl.core.exceptions import TimeoutError

T = TypeVar("T")


async def run_with_timeout(
    awaitable: Awaitable[T],
    timeout: float,
    timeout_message: str = "Operation timed out",
) -> T:
    """Await ``awaitable`` for at most ``timeout`` seconds.

    Raises:
        TimeoutError: payctl's TimeoutError, carrying the timeout
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(timeout_message, timeout_seconds=max(1, round(timeout)))


async def call_maybe_async(func: Callable[..., Any], *args: Any) -> Any:
    """Call a plain or coroutine function and await the result if needed."""
    result = func(*args)
    if inspect.isawaitable(result):
        return await result
    return result


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from synchronous click code.

    Inside a running loop (e.g. a command invoked from async tests) the
    coroutine gets its own loop on a worker thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
