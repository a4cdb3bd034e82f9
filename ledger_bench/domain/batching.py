from __future__ import annotations

from typing import List


def partition(count: int, batch_size: int) -> List[range]:
    """
    Split `[0, count)` into consecutive ranges of at most `batch_size` items.

    The last range holds the remainder; an empty workload yields no batches.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [range(start, min(start + batch_size, count)) for start in range(0, count, batch_size)]


__all__ = ["partition"]
