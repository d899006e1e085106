"""
Bounded-concurrency helpers for the enrichment fan-out.

``run_in_batches`` walks the input in contiguous groups. Each group runs
concurrently and must fully settle before the next one starts, so at most
``batch_size`` calls are ever in flight. Per-item failures are returned as
``Rejected`` outcomes instead of being raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

from tubescout.domain.models import Fulfilled, Outcome, Rejected

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _settle(result: object) -> Outcome:
    if isinstance(result, BaseException):
        return Rejected(result)
    return Fulfilled(result)


async def run_in_batches(
    items: Sequence[T],
    batch_size: int,
    fn: Callable[[T], Awaitable[R]],
) -> List[Outcome]:
    """
    Apply ``fn`` to every item, ``batch_size`` at a time.

    Args:
        items: Inputs, processed in order
        batch_size: Maximum concurrent invocations of ``fn`` (>= 1)
        fn: Async callable applied to each item

    Returns:
        One Fulfilled/Rejected outcome per item, in input order
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    outcomes: List[Outcome] = []
    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        results = await asyncio.gather(
            *(fn(item) for item in batch), return_exceptions=True
        )
        outcomes.extend(_settle(result) for result in results)

    rejected = sum(isinstance(o, Rejected) for o in outcomes)
    if rejected:
        logger.debug(f"Batch run finished: {len(outcomes) - rejected} ok, {rejected} rejected")

    return outcomes


def fulfilled_values(outcomes: Sequence[Outcome]) -> list:
    """Values of Fulfilled outcomes that are not None, order preserved"""
    return [
        outcome.value
        for outcome in outcomes
        if isinstance(outcome, Fulfilled) and outcome.value is not None
    ]
