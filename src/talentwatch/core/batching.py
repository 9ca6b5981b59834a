"""Fixed-size batch execution with bounded concurrency.

Units of work are processed in batches; each unit's failure is captured
on its outcome instead of aborting the batch.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from talentwatch.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchOutcome(Generic[T, R]):
    """Result of processing a single unit.

    Attributes:
        item: The input unit
        result: Worker return value when successful
        error: Exception raised by the worker, if any
    """

    item: T
    result: R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_batched(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = 10,
    max_concurrency: int = 10,
) -> list[BatchOutcome[T, R]]:
    """Run ``worker`` over ``items`` in fixed-size batches.

    Outcomes are returned in input order. A failing unit records its
    exception and the remaining units still run.

    Args:
        items: Units of work
        worker: Async callable applied to each unit
        batch_size: Units per batch
        max_concurrency: Maximum units awaited at once within a batch

    Returns:
        One BatchOutcome per input unit
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    outcomes: list[BatchOutcome[T, R]] = []

    async def bounded(item: T) -> R:
        async with semaphore:
            return await worker(item)

    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        results = await asyncio.gather(*(bounded(item) for item in batch), return_exceptions=True)

        for item, result in zip(batch, results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    "batch_unit_failed",
                    error_type=type(result).__name__,
                    error=str(result),
                )
                outcomes.append(BatchOutcome(item=item, error=result))
            elif isinstance(result, BaseException):
                raise result
            else:
                outcomes.append(BatchOutcome(item=item, result=result))

        logger.debug("batch_completed", batch_start=start, batch_size=len(batch))

    return outcomes
