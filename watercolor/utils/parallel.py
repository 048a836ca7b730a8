"""
Row-band execution for the per-pixel stages.

A stage hands over a function `fn(y_start, y_end)` that computes output rows
[y_start, y_end) from data it does not modify. With one worker the function
is called once for the whole image; otherwise the rows are split into bands
and run on a thread pool. Bands never overlap, so results match the
sequential path exactly.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Tuple

MIN_BAND_ROWS = 16


def row_bands(height: int, workers: int) -> List[Tuple[int, int]]:
    """Splits [0, height) into at most `workers` contiguous bands."""
    if height <= 0:
        return []
    count = max(1, min(workers, height // MIN_BAND_ROWS or 1))
    step = -(-height // count)
    return [(y, min(y + step, height)) for y in range(0, height, step)]


def run_row_bands(fn: Callable[[int, int], None], height: int, workers: int = 1) -> None:
    ranges = row_bands(height, workers)
    if len(ranges) <= 1:
        for y_start, y_end in ranges:
            fn(y_start, y_end)
        return

    with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
        futures = [executor.submit(fn, y_start, y_end) for y_start, y_end in ranges]
        # result() re-raises the first failure from a band
        for future in futures:
            future.result()
