from __future__ import annotations

import concurrent.futures
from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_with_concurrency(
    items: Sequence[T],
    concurrency: int,
    mapper: Callable[[T], R],
) -> list[R]:
    """Run ``mapper`` over ``items`` with at most ``concurrency`` calls in flight.

    The executor's work queue hands items to a fixed set of worker threads;
    each result lands in the slot of its input index, so the output order
    matches ``items`` whatever the completion order. Every call is awaited
    before returning; the first exception (in completion order) is re-raised
    once all workers are done.
    """
    if not items:
        return []

    slots: list[Optional[R]] = [None] * len(items)
    workers = max(1, min(concurrency, len(items)))
    first_error: Optional[BaseException] = None

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futs = {ex.submit(mapper, item): idx for idx, item in enumerate(items)}
        for fut in concurrent.futures.as_completed(futs):
            try:
                slots[futs[fut]] = fut.result()
            except Exception as exc:
                if first_error is None:
                    first_error = exc

    if first_error is not None:
        raise first_error
    return slots  # type: ignore[return-value]
