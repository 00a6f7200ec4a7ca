import threading
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from mandelbrot_explorer import scheduler
from mandelbrot_explorer.scheduler import (
    RowRange,
    TileScheduler,
    check_partition,
    new_grid,
    partition_rows,
)
from mandelbrot_explorer.viewport import Viewport


VIEW = Viewport(origin=complex(-0.75, 0.05), extent=2.0, iteration_limit=40)


def reference_grid(width, height, viewport=VIEW):
    grid = new_grid(width, height)
    TileScheduler(worker_count=1).render(viewport, grid)
    return grid


class RecordingKernel:
    """Wraps render_rows and records which rows each call covered."""

    def __init__(self, kernel):
        self.kernel = kernel
        self.calls = []
        self.lock = threading.Lock()

    def __call__(self, grid, start, end, *args):
        with self.lock:
            self.calls.append((start, end))
        self.kernel(grid, start, end, *args)


def test_even_split():
    assert partition_rows(12, 4) == [RowRange(0, 3), RowRange(3, 6), RowRange(6, 9), RowRange(9, 12)]


def test_remainder_goes_to_last_range():
    assert partition_rows(10, 3) == [RowRange(0, 3), RowRange(3, 6), RowRange(6, 10)]
    assert len(partition_rows(10, 3)[-1]) == 4


@pytest.mark.parametrize("height", [1, 2, 7, 60, 97])
def test_partition_covers_every_row_once(height):
    for workers in list(range(1, height + 1)) + [height + 1, 2 * height, 1000]:
        ranges = partition_rows(height, workers)
        check_partition(ranges, height)
        rows = [row for r in ranges for row in range(r.start, r.end)]
        assert rows == list(range(height))
        assert len(ranges) == min(workers, height)


def test_partition_rejects_bad_input():
    with pytest.raises(ValueError):
        partition_rows(0, 4)
    with pytest.raises(ValueError):
        partition_rows(10, 0)


@pytest.mark.parametrize("ranges", [
    [RowRange(0, 5), RowRange(6, 10)],   # gap
    [RowRange(0, 6), RowRange(5, 10)],   # overlap
    [RowRange(0, 5), RowRange(5, 9)],    # short
    [RowRange(0, 5), RowRange(5, 5), RowRange(5, 10)],  # empty range
])
def test_check_partition_catches_bad_ranges(ranges):
    with pytest.raises(ValueError):
        check_partition(ranges, 10)


@pytest.mark.parametrize("workers", [2, 3, 8, 64])
def test_parallel_render_matches_single_worker(workers):
    grid = new_grid(30, 25)
    TileScheduler(worker_count=workers).render(VIEW, grid)
    assert np.array_equal(grid, reference_grid(30, 25))


def test_every_cell_is_overwritten():
    grid = np.full((20, 20, 3), 7, dtype=np.uint8)
    TileScheduler(worker_count=4).render(VIEW, grid)
    assert np.array_equal(grid, reference_grid(20, 20))


def test_workers_get_disjoint_rows(monkeypatch):
    kernel = RecordingKernel(scheduler.render_rows)
    monkeypatch.setattr(scheduler, "render_rows", kernel)

    sched = TileScheduler(worker_count=5)
    sched.render(VIEW, new_grid(16, 23))

    assert sorted(kernel.calls) == [(0, 4), (4, 8), (8, 12), (12, 16), (16, 23)]
    assert sched.passes == 1


def test_falls_back_to_calling_thread(monkeypatch, caplog):
    class NoThreads:
        def __init__(self, max_workers=None, thread_name_prefix=""):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def submit(self, fn, *args):
            raise RuntimeError("can't start new thread")

    monkeypatch.setattr(scheduler, "ThreadPoolExecutor", NoThreads)
    grid = new_grid(20, 18)
    with caplog.at_level("WARNING", logger="mandelbrot_explorer.scheduler"):
        TileScheduler(worker_count=3).render(VIEW, grid)

    assert np.array_equal(grid, reference_grid(20, 18))
    assert len(caplog.records) == 3


def test_failed_submit_still_renders_each_range_once(monkeypatch):
    class FlakyPool(ThreadPoolExecutor):
        submits = 0

        def submit(self, fn, *args, **kwargs):
            future = super().submit(fn, *args, **kwargs)
            FlakyPool.submits += 1
            if FlakyPool.submits % 2 == 0:
                # Work item was queued, but the caller is told it failed
                raise RuntimeError("can't start new thread")
            return future

    kernel = RecordingKernel(scheduler.render_rows)
    monkeypatch.setattr(scheduler, "render_rows", kernel)
    monkeypatch.setattr(scheduler, "ThreadPoolExecutor", FlakyPool)

    grid = new_grid(20, 24)
    TileScheduler(worker_count=4).render(VIEW, grid)

    assert sorted(kernel.calls) == [(0, 6), (6, 12), (12, 18), (18, 24)]
    assert np.array_equal(grid, reference_grid(20, 24))


def test_worker_errors_reach_the_caller(monkeypatch):
    def broken(grid, start, end, *args):
        if start > 0:
            raise FloatingPointError("boom")

    monkeypatch.setattr(scheduler, "render_rows", broken)
    with pytest.raises(FloatingPointError):
        TileScheduler(worker_count=3).render(VIEW, new_grid(9, 9))


def test_rejects_zero_workers():
    with pytest.raises(ValueError):
        TileScheduler(worker_count=0)


def test_errors_from_orphaned_work_items_reach_the_caller(monkeypatch):
    class FlakyPool(ThreadPoolExecutor):
        def submit(self, fn, *args, **kwargs):
            super().submit(fn, *args, **kwargs)
            # Queued, but the caller only sees the failure
            raise RuntimeError("can't start new thread")

    def broken(grid, start, end, *args):
        if start == 6:
            raise FloatingPointError("boom")

    monkeypatch.setattr(scheduler, "render_rows", broken)
    monkeypatch.setattr(scheduler, "ThreadPoolExecutor", FlakyPool)

    with pytest.raises(FloatingPointError):
        TileScheduler(worker_count=3).render(VIEW, new_grid(9, 18))


def test_check_partition_survives_optimized_mode():
    # Raised explicitly, so it still fires under python -O
    with pytest.raises(ValueError, match="grid has 10"):
        check_partition([RowRange(0, 4), RowRange(4, 8)], 10)
