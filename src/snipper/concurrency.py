from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from contextvars import copy_context
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_in_order(
    func: Callable[[T], R], items: Sequence[T], *, max_workers: int
) -> list[R]:
    """
    Apply ``func`` to every item on a thread pool, keeping the input order.

    Each call runs in a copy of the caller's context, so runtime flags reach
    the workers. The first exception cancels calls that have not started and
    is re-raised.
    """
    if not items:
        return []
    if max_workers <= 1 or len(items) == 1:
        return [func(item) for item in items]

    results: list[R | None] = [None] * len(items)
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as executor:
        pending = {
            executor.submit(copy_context().run, func, item): index
            for index, item in enumerate(items)
        }
        try:
            for future in as_completed(pending):
                results[pending[future]] = future.result()
        except Exception:
            for future in pending:
                future.cancel()
            raise

    return results  # type: ignore[return-value]
