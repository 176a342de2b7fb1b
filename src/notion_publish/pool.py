"""Run coroutines over a list of items with a fixed number in flight."""

import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    limit: int,
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
) -> List[R]:
    """
    Await ``worker(item)`` for every item, at most ``limit`` at a time.

    Results are returned in completion order. When a worker raises, every
    other running or waiting worker is cancelled and the first exception
    is re-raised.

    Args:
        limit: Maximum number of workers running concurrently
        items: Inputs, one worker call each
        worker: Coroutine function to run per item

    Returns:
        Worker results in the order they finished
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)
    results: List[R] = []

    async def run(item: T) -> None:
        async with semaphore:
            results.append(await worker(item))

    tasks = [asyncio.create_task(run(item)) for item in items]
    if not tasks:
        return results

    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    return results
