"""Tests for concurrent_map.

Covers:
- Index-aligned results regardless of completion order
- Worker count clamping (below 1, above len(items))
- Every index claimed exactly once
- First error propagates
"""

from __future__ import annotations

import random
import threading
import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from meetflow.concurrency import concurrent_map


class TestConcurrentMap:
    def test_empty_items(self):
        assert concurrent_map([], 4, lambda item, i: item) == []

    def test_results_are_index_aligned(self):
        items = list(range(10))

        def work(item: int, index: int) -> int:
            time.sleep(random.uniform(0, 0.005))
            return item * item

        assert concurrent_map(items, 3, work) == [i * i for i in items]

    def test_work_receives_item_and_index(self):
        seen: list[tuple[str, int]] = []
        lock = threading.Lock()

        def work(item: str, index: int) -> str:
            with lock:
                seen.append((item, index))
            return item

        concurrent_map(["a", "b", "c"], 2, work)

        assert sorted(seen) == [("a", 0), ("b", 1), ("c", 2)]

    @pytest.mark.parametrize("concurrency", [0, -3])
    def test_non_positive_concurrency_runs_serially(self, concurrency):
        threads: set[str] = set()

        def work(item: int, index: int) -> int:
            threads.add(threading.current_thread().name)
            return item + 1

        assert concurrent_map([1, 2, 3], concurrency, work) == [2, 3, 4]
        assert len(threads) == 1

    def test_never_exceeds_concurrency(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def work(item: int, index: int) -> int:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.01)
            with lock:
                active -= 1
            return item

        concurrent_map(list(range(12)), 3, work)

        assert 1 <= peak <= 3

    def test_concurrency_capped_at_item_count(self):
        threads: set[str] = set()
        lock = threading.Lock()

        def work(item: int, index: int) -> int:
            with lock:
                threads.add(threading.current_thread().name)
            time.sleep(0.005)
            return item

        concurrent_map([1, 2], 50, work)

        assert len(threads) <= 2

    def test_each_index_claimed_once(self):
        counts = [0] * 50
        lock = threading.Lock()

        def work(item: int, index: int) -> int:
            with lock:
                counts[index] += 1
            return item

        concurrent_map(list(range(50)), 8, work)

        assert counts == [1] * 50

    def test_first_error_propagates(self):
        def work(item: int, index: int) -> int:
            if item == 3:
                raise RuntimeError("item 3 failed")
            return item

        with pytest.raises(RuntimeError, match="item 3 failed"):
            concurrent_map(list(range(6)), 2, work)

    def test_error_stops_new_claims_when_serial(self):
        calls: list[int] = []

        def work(item: int, index: int) -> int:
            calls.append(index)
            if index == 1:
                raise ValueError("boom")
            return item

        with pytest.raises(ValueError):
            concurrent_map(list(range(5)), 1, work)

        assert calls == [0, 1]


class TestConcurrentMapProperties:
    @given(
        items=st.lists(st.integers(), max_size=30),
        concurrency=st.integers(min_value=-2, max_value=10),
    )
    @settings(max_examples=50, deadline=None)
    def test_same_as_serial_map(self, items, concurrency):
        result = concurrent_map(items, concurrency, lambda item, i: (i, item * 2))
        assert result == [(i, item * 2) for i, item in enumerate(items)]
