from __future__ import annotations

import threading
import time

import pytest

from netcfg_inventory.util.concurrency import parallel_map_ordered


def test_parallel_map_ordered_preserves_order() -> None:
    def slow_double(x: int) -> int:
        time.sleep(0.01 * (5 - x))
        return x * 2

    assert parallel_map_ordered(slow_double, range(5), max_workers=3) == [0, 2, 4, 6, 8]


def test_parallel_map_ordered_bounds_inflight_calls() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def work(x: int) -> int:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.01)
        with lock:
            active -= 1
        return x

    assert parallel_map_ordered(work, range(10), max_workers=2) == list(range(10))
    assert peak <= 2


def test_parallel_map_ordered_propagates_first_error() -> None:
    def work(x: int) -> int:
        if x == 3:
            raise ValueError("boom")
        return x

    with pytest.raises(ValueError, match="boom"):
        parallel_map_ordered(work, range(6), max_workers=2)


def test_parallel_map_ordered_handles_empty_input() -> None:
    assert parallel_map_ordered(lambda x: x, [], max_workers=4) == []
