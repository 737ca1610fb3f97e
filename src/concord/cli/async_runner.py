"""Async execution for CLI commands.

Click expects synchronous callables; these helpers run a coroutine to
completion on a fresh event loop.
"""

import asyncio
import functools
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

T = TypeVar("T")
P = ParamSpec("P")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine from synchronous code.

    Raises:
        RuntimeError: If called while an event loop is already running.
        Any exception raised by the coroutine is propagated.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop - the normal case for CLI commands
        return asyncio.run(coro)
    coro.close()
    raise RuntimeError("run_async() cannot be called from a running event loop")


def async_command(
    f: Callable[P, Coroutine[Any, Any, T]],
) -> Callable[P, T]:
    """Decorator that wraps async functions for Click commands.

    Usage:
        @click.command()
        @async_command
        async def my_command(arg: str) -> None:
            result = await some_async_operation(arg)
            console.print(result)
    """

    @functools.wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        return run_async(f(*args, **kwargs))

    return wrapper
