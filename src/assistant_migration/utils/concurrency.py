"""Fan-out helper for the migration pipeline.

One asyncio task is started per item and all of them are awaited jointly.
By default the join is fail-fast: the first failure is re-raised and the
remaining tasks are cancelled. With ``fail_fast=False`` every outcome is
collected instead.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchResult(Generic[T, R]):
    """Outcome of a batch run with failures collected."""

    succeeded: list[R] = field(default_factory=list)
    failed: list[tuple[T, Exception]] = field(default_factory=list)


async def run_batch(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    max_concurrent: int | None = None,
    fail_fast: bool = True,
) -> BatchResult[T, R]:
    """Run ``worker`` over every item concurrently.

    Args:
        items: Inputs, one task each
        worker: Coroutine function applied to each item
        max_concurrent: Optional cap on tasks running at once (unbounded when None)
        fail_fast: Re-raise the first failure instead of collecting failures

    Returns:
        BatchResult; ``succeeded`` keeps the input order of successful items

    Raises:
        Exception: The first failure, when ``fail_fast`` is set
    """
    semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None

    async def run_one(item: T) -> R:
        if semaphore is None:
            return await worker(item)
        async with semaphore:
            return await worker(item)

    tasks = [asyncio.ensure_future(run_one(item)) for item in items]
    if not tasks:
        return BatchResult()

    if fail_fast:
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let cancelled tasks finish so none is left pending
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return BatchResult(succeeded=list(results))

    outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    batch: BatchResult[T, R] = BatchResult()
    for item, outcome in zip(items, outcomes, strict=True):
        if isinstance(outcome, Exception):
            batch.failed.append((item, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            batch.succeeded.append(outcome)
    return batch
