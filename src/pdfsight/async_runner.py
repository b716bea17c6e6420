"""Helpers to run async operations from sync or async contexts."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, TypeVar

from pdfsight.exceptions import AsyncExecutionError

if TYPE_CHECKING:
    from collections.abc import Coroutine

T = TypeVar("T")


def _run_in_background_thread(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine on a worker thread that owns its own event loop.

    Args:
        coro: The coroutine to run.

    Raises:
        AsyncExecutionError: If the coroutine raises an exception.

    Returns:
        The result of the coroutine.
    """
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdfsight-async") as executor:
        future = executor.submit(asyncio.run, coro)
        try:
            return future.result()
        except BaseException as exc:
            raise AsyncExecutionError(result=exc) from exc


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine to completion from any calling context.

    Without a running loop the coroutine runs on a fresh loop in the current
    thread, so its exceptions propagate unchanged. Inside a running loop it is
    moved to a worker thread and failures are wrapped in `AsyncExecutionError`.

    Args:
        coro: The coroutine to run.

    Returns:
        The result of the coroutine.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    return _run_in_background_thread(coro)
