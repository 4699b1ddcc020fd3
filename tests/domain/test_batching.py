from __future__ import annotations

import asyncio

import pytest

from investmap.domain.batching import process_in_batches
from tests.helpers.fakes import RecordingSleep


def test_results_keep_input_order_and_batches_pause() -> None:
    sleep = RecordingSleep()
    progress: list[tuple[int, int]] = []

    async def worker(item: int) -> int:
        # later items finish first
        await asyncio.sleep(0.001 * (5 - item))
        return item * 10

    results = asyncio.run(
        process_in_batches(
            [1, 2, 3, 4, 5],
            worker,
            batch_size=3,
            pause_seconds=1.0,
            sleep=sleep,
            on_progress=lambda done, total: progress.append((done, total)),
        )
    )

    assert results == [10, 20, 30, 40, 50]
    assert sleep.delays == [1.0]
    assert progress == [(3, 5), (5, 5)]


def test_empty_input_does_nothing() -> None:
    sleep = RecordingSleep()

    async def worker(item: int) -> int:
        return item

    assert asyncio.run(process_in_batches([], worker, sleep=sleep)) == []
    assert sleep.delays == []


def test_batch_size_must_be_positive() -> None:
    async def worker(item: int) -> int:
        return item

    with pytest.raises(ValueError, match="positive"):
        asyncio.run(process_in_batches([1], worker, batch_size=0))
