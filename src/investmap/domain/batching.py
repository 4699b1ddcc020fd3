"""Fixed-size batch fan-out for I/O-bound per-item work."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

log = getLogger(__name__)

type ProgressCallback = Callable[[int, int], None]


def log_progress(completed: int, total: int) -> None:
    percentage = round(completed / total * 100) if total else 100
    log.info("Progress: %s/%s (%s%%)", completed, total, percentage)


async def process_in_batches[T, R](
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    batch_size: int = 3,
    pause_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_progress: ProgressCallback | None = log_progress,
) -> list[R]:
    """Run ``worker`` over ``items`` in batches, pausing between batches.

    Items of one batch run concurrently. Results come back in input order,
    not completion order.
    """

    if batch_size < 1:
        raise ValueError("batch_size must be positive")

    results: list[R] = []
    total = len(items)
    for start in range(0, total, batch_size):
        batch = items[start : start + batch_size]
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
        if on_progress is not None:
            on_progress(len(results), total)
        if start + batch_size < total:
            await sleep(pause_seconds)
    return results


__all__ = ["ProgressCallback", "log_progress", "process_in_batches"]
