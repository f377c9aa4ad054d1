"""Bounded-concurrency map over a list of independent calls.

concurrent_map() runs ``work`` over every item with at most N worker
threads.  Workers share one cursor; claiming the next index happens under
a lock, so no index is processed twice.

Errors are not caught: if ``work`` raises, workers stop claiming new
items and the first exception propagates out of concurrent_map().
Callers that need partial-failure tolerance catch inside ``work`` and
encode the error in its return value.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class _Cursor:
    """Shared work cursor. next() hands out each index exactly once."""

    def __init__(self, size: int) -> None:
        self._size = size
        self._next = 0
        self._stopped = False
        self._lock = threading.Lock()

    def next(self) -> int | None:
        with self._lock:
            if self._stopped or self._next >= self._size:
                return None
            index = self._next
            self._next += 1
            return index

    def stop(self) -> None:
        with self._lock:
            self._stopped = True


def concurrent_map(
    items: Sequence[T],
    concurrency: int,
    work: Callable[[T, int], R],
) -> list[R]:
    """Apply ``work`` to every item with bounded parallelism.

    Args:
        items: Input items.
        concurrency: Maximum in-flight calls.  Values below 1 are treated
            as 1; values above ``len(items)`` are capped at ``len(items)``.
        work: Callable receiving ``(item, index)``.

    Returns:
        Results index-aligned with ``items``, regardless of completion order.

    Raises:
        Exception: The first exception raised by ``work``.
    """
    size = len(items)
    if size == 0:
        return []

    workers = min(max(1, concurrency), size)
    results: list[R] = [None] * size  # type: ignore[list-item]
    cursor = _Cursor(size)
    errors: list[BaseException] = []
    errors_lock = threading.Lock()

    def worker() -> None:
        while True:
            index = cursor.next()
            if index is None:
                return
            try:
                results[index] = work(items[index], index)
            except BaseException as exc:
                cursor.stop()
                with errors_lock:
                    errors.append(exc)
                return

    if workers == 1:
        worker()
    else:
        threads = [
            threading.Thread(target=worker, name=f"concurrent-map-{i}", daemon=True)
            for i in range(workers)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    if errors:
        logger.debug("concurrent_map aborted after %d error(s)", len(errors))
        raise errors[0]
    return results
