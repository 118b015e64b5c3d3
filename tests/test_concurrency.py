"""Tests for the batch fan-out helper."""

from __future__ import annotations

import asyncio

import pytest

from assistant_migration.utils.concurrency import BatchResult, run_batch


async def test_results_keep_input_order() -> None:
    async def worker(delay: float) -> float:
        await asyncio.sleep(delay)
        return delay

    result = await run_batch([0.03, 0.01, 0.02], worker)

    assert result.succeeded == [0.03, 0.01, 0.02]
    assert result.failed == []


async def test_empty_batch() -> None:
    async def worker(item: int) -> int:
        return item

    assert await run_batch([], worker) == BatchResult()


async def test_fail_fast_reraises_and_cancels_others() -> None:
    cancelled: list[int] = []

    async def worker(item: int) -> int:
        if item == 2:
            raise RuntimeError("boom")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(item)
            raise
        return item

    with pytest.raises(RuntimeError, match="boom"):
        await run_batch([1, 2, 3], worker)

    assert sorted(cancelled) == [1, 3]


async def test_collect_mode_records_failures() -> None:
    async def worker(item: int) -> int:
        if item % 2:
            raise ValueError(f"odd {item}")
        return item * 10

    result = await run_batch([1, 2, 3, 4], worker, fail_fast=False)

    assert result.succeeded == [20, 40]
    assert [(item, str(error)) for item, error in result.failed] == [(1, "odd 1"), (3, "odd 3")]


async def test_max_concurrent_bounds_running_tasks() -> None:
    running = 0
    peak = 0

    async def worker(item: int) -> int:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return item

    result = await run_batch(list(range(10)), worker, max_concurrent=3)

    assert result.succeeded == list(range(10))
    assert peak == 3


async def test_unbounded_runs_everything_at_once() -> None:
    running = 0
    peak = 0

    async def worker(item: int) -> int:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.01)
        running -= 1
        return item

    await run_batch(list(range(8)), worker)

    assert peak == 8
