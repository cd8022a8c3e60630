"""
Async concurrency helpers.

The budget meter is async-first, but the meter and config stores do blocking
filesystem I/O that must not stall the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Any, TypeVar

T = TypeVar("T")

# Ledger I/O is serialized by the meter, so a small pool is enough.
_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="night_factory_io")


async def _wait(future: Future[T]) -> T:
    # The concurrent future is polled instead of awaited through
    # `loop.run_in_executor()` so that cross-thread wakeups never hang in
    # restricted environments.
    while True:
        if future.done():
            return future.result()
        await asyncio.sleep(0.001)


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Run a synchronous callable in a shared thread pool."""
    future = _EXECUTOR.submit(partial(func, *args, **kwargs))
    try:
        return await _wait(future)
    except asyncio.CancelledError:
        future.cancel()
        raise


async def run_sync_or_undo(func: Callable[[], T], undo: Callable[[T], None]) -> T:
    """
    Run a synchronous callable that acquires something, in the shared pool.

    If the awaiting task is cancelled after ``func`` has already started, the
    worker cannot be stopped; ``undo`` is then called with its result once it
    finishes so the acquired resource is not leaked.
    """
    future = _EXECUTOR.submit(func)
    try:
        return await _wait(future)
    except asyncio.CancelledError:
        if not future.cancel():
            future.add_done_callback(partial(_undo_result, undo))
        raise


def _undo_result(undo: Callable[[T], None], future: Future[T]) -> None:
    if future.exception() is None:
        undo(future.result())


__all__ = ["run_sync", "run_sync_or_undo"]
