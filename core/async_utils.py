"""
Scripture Study - Async Utilities

Small async patterns shared by the fetchers:
- Bounded fan-out over independent coroutines
- Periodic background work with clean cancellation
"""

from __future__ import annotations

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    List,
    TypeVar,
)

from opentelemetry import trace

T = TypeVar("T")

tracer = trace.get_tracer(__name__)


async def gather_with_concurrency(
    *coros: Awaitable[T],
    max_concurrency: int = 10,
    return_exceptions: bool = False,
) -> List[T]:
    """
    Like asyncio.gather but with controlled concurrency.

    Results keep the order of the coroutines passed in.

    Usage:
        results = await gather_with_concurrency(
            fetch(url1),
            fetch(url2),
            fetch(url3),
            max_concurrency=5,
        )
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded_coro(coro: Awaitable[T]) -> T:
        async with semaphore:
            return await coro

    return await asyncio.gather(
        *[bounded_coro(coro) for coro in coros],
        return_exceptions=return_exceptions,
    )


async def run_periodically(
    interval_seconds: float,
    fn: Callable[[], Any],
) -> None:
    """
    Call ``fn`` every ``interval_seconds`` until the task is cancelled.

    ``fn`` may be sync or async. Intended to be wrapped in
    ``asyncio.create_task`` and cancelled on shutdown.

    Usage:
        task = asyncio.create_task(run_periodically(300, cache.purge_expired))
        ...
        task.cancel()
    """
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be > 0")

    while True:
        await asyncio.sleep(interval_seconds)
        with tracer.start_as_current_span("periodic.tick"):
            result = fn()
            if asyncio.iscoroutine(result):
                await result
