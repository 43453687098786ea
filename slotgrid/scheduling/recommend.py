"""Rank contiguous slot windows by worst-case, then average, attendance."""

from collections import deque
from collections.abc import Sequence

from slotgrid.scheduling.models import Window

DEFAULT_TOP_N = 5


def window_size(slot_minutes: int, min_duration_minutes: int) -> int:
    """Number of slots needed to cover ``min_duration_minutes``; at least one."""
    assert slot_minutes > 0
    return max(1, -(-min_duration_minutes // slot_minutes))


def find_recommended_windows(
    counts: Sequence[int],
    slot_minutes: int,
    min_duration_minutes: int,
    top_n: int = DEFAULT_TOP_N,
) -> list[Window]:
    """Return the best ``top_n`` windows of contiguous slots.

    Every start position is considered (step 1), windows that someone cannot
    fully attend (``min_count == 0``) are dropped, and the rest are sorted by
    ``(min_count, avg_count)`` descending. The sort is stable, so ties keep
    left-to-right order. Overlapping windows are all kept.

    Contiguity is in flat index space, so a window may run from the last slot
    of one day into the first slot of the next.
    """
    size = window_size(slot_minutes, min_duration_minutes)
    if top_n <= 0 or size > len(counts):
        return []

    candidates: list[tuple[int, int, float]] = []
    minima: deque[int] = deque()
    running = 0
    for i, count in enumerate(counts):
        running += count
        while minima and counts[minima[-1]] >= count:
            minima.pop()
        minima.append(i)

        start = i - size + 1
        if start < 0:
            continue
        while minima[0] < start:
            minima.popleft()
        min_count = counts[minima[0]]
        if min_count > 0:
            candidates.append((start, min_count, running / size))
        running -= counts[start]

    candidates.sort(key=lambda c: (-c[1], -c[2]))
    return [
        Window(slots=list(range(start, start + size)), min_count=min_count, avg_count=avg)
        for start, min_count, avg in candidates[:top_n]
    ]
