"""
Parallel tiling of the pixel grid.

The TileScheduler handles:
- Splitting the grid rows into one contiguous range per worker
- Running each range on its own thread (the Numba kernels release the GIL)
- Blocking until every range is done, so a grid is never shown half-drawn
- Falling back to the calling thread if a worker can't be started

Workers own disjoint rows of a single numpy array, so no locking is
needed while the grid is filled.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple

import numpy as np

from .colormaps import DEFAULT_SATURATION
from .compute import render_rows

logger = logging.getLogger(__name__)


class RowRange(NamedTuple):
    """Half-open row interval [start, end) owned by one worker."""

    start: int
    end: int

    def __len__(self):
        return self.end - self.start


def partition_rows(height: int, worker_count: int) -> List[RowRange]:
    """
    Split [0, height) into contiguous, evenly sized row ranges.

    Each range gets height // n rows and the remainder goes to the last
    one. n is min(worker_count, height) so that no range is empty.

    Args:
        height: Number of grid rows (>= 1)
        worker_count: Requested number of workers (>= 1)

    Returns:
        List of RowRange covering every row exactly once, in order
    """
    if height < 1:
        raise ValueError(f"height must be positive, got {height}")
    if worker_count < 1:
        raise ValueError(f"worker_count must be positive, got {worker_count}")

    n = min(worker_count, height)
    rows_per_worker = height // n
    ranges = [RowRange(i * rows_per_worker, (i + 1) * rows_per_worker) for i in range(n)]
    ranges[-1] = RowRange(ranges[-1].start, height)
    return ranges


def check_partition(ranges, height):
    """
    Verify that ranges are contiguous, non-overlapping and cover [0, height).

    Raises:
        ValueError describing the first gap, overlap or empty range
    """
    expected_start = 0
    for r in ranges:
        if r.start != expected_start:
            raise ValueError(f"range {r} does not start at row {expected_start}")
        if r.end <= r.start:
            raise ValueError(f"range {r} is empty")
        expected_start = r.end
    if expected_start != height:
        raise ValueError(f"ranges end at row {expected_start}, grid has {height}")


def new_grid(width, height):
    """Allocate an all-black (height, width, 3) RGB grid."""
    return np.zeros((height, width, 3), dtype=np.uint8)


class TileScheduler:
    """
    Fills a pixel grid for a viewport using a short-lived thread pool.

    Usage:
        scheduler = TileScheduler(worker_count=8)
        grid = new_grid(600, 600)
        scheduler.render(viewport, grid)  # returns once every row is done

    Attributes:
        worker_count: Maximum number of threads per pass
        saturation: HSV saturation used by the color mapping
    """

    def __init__(self, worker_count, saturation=DEFAULT_SATURATION):
        if worker_count < 1:
            raise ValueError(f"worker_count must be positive, got {worker_count}")
        self.worker_count = worker_count
        self.saturation = saturation
        self.passes = 0
        # A new pass can't start before the previous one has joined
        self._lock = threading.Lock()

    def render(self, viewport, grid):
        """
        Recompute every cell of grid for viewport.

        Blocks until all workers have finished. Exceptions raised by a
        worker are re-raised here.

        Args:
            viewport: Viewport snapshot to render
            grid: (height, width, 3) uint8 array, overwritten in place
        """
        height = grid.shape[0]
        ranges = partition_rows(height, self.worker_count)
        check_partition(ranges, height)

        with self._lock:
            started = time.perf_counter()
            self._run(ranges, viewport, grid)
            self.passes += 1
            logger.debug(
                "Rendered %dx%d at extent %.3e, %d iterations, %d workers in %.1f ms",
                grid.shape[1], height, viewport.extent, viewport.iteration_limit,
                len(ranges), (time.perf_counter() - started) * 1000
            )

    def _run(self, ranges, viewport, grid):
        args = (viewport.origin.real, viewport.origin.imag, float(viewport.extent),
                int(viewport.iteration_limit), float(self.saturation))

        if len(ranges) == 1:
            self._render_range(grid, ranges[0], args)
            return

        # A failed submit may still leave its work item queued, so every
        # range is claimed exactly once by whoever gets to it first.
        # Errors are collected per claimed range rather than through futures,
        # since an orphaned work item has no future.
        claims = [threading.Lock() for _ in ranges]
        errors = []

        with ThreadPoolExecutor(max_workers=len(ranges),
                                thread_name_prefix="tile") as pool:
            inline = []
            for row_range, claim in zip(ranges, claims):
                try:
                    pool.submit(self._claim_and_render, claim, errors, grid, row_range, args)
                except RuntimeError as e:
                    logger.warning("Could not start worker for rows %d-%d (%s); "
                                   "rendering them on the calling thread",
                                   row_range.start, row_range.end, e)
                    inline.append((row_range, claim))

            for row_range, claim in inline:
                self._claim_and_render(claim, errors, grid, row_range, args)

        # Leaving the pool joined every worker, orphaned work items included
        if errors:
            row_range, error = errors[0]
            logger.error("Rendering rows %d-%d failed: %s", row_range.start, row_range.end, error)
            raise error

    @classmethod
    def _claim_and_render(cls, claim, errors, grid, row_range, args):
        if not claim.acquire(blocking=False):
            return
        try:
            cls._render_range(grid, row_range, args)
        except Exception as e:
            errors.append((row_range, e))

    @staticmethod
    def _render_range(grid, row_range, args):
        render_rows(grid, row_range.start, row_range.end, *args)
