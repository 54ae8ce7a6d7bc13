# region Imports
from __future__ import annotations

import heapq
from typing import List, Tuple

import numpy as np
# endregion


# region Frontier (open set)
class Frontier:
    """
    Binary-heap open set keyed by (f, h, insertion order).

    heapq has no decrease-key, so improving a cell pushes a fresh entry and
    the older one goes stale; ``_stamp`` remembers the sequence number of the
    live entry per cell and ``pop`` drops anything else. Membership lives in
    the caller's ``in_open`` buffer.
    """

    def __init__(self, membership: np.ndarray):
        self._member = membership
        self._stamp = np.zeros(len(membership), dtype=np.int64)
        self._heap: List[Tuple[float, float, int, int]] = []
        self._seq = 0
        self._live = 0

    def clear(self) -> None:
        self._heap.clear()
        self._member.fill(False)
        self._seq = 0
        self._live = 0

    def push(self, index: int, f: float, h: float) -> None:
        """Insert ``index``, or re-key it if it is already queued."""
        if not self._member[index]:
            self._member[index] = True
            self._live += 1
        self._seq += 1
        self._stamp[index] = self._seq
        heapq.heappush(self._heap, (f, h, self._seq, index))

    def pop(self) -> int:
        heap = self._heap
        while heap:
            _, _, seq, index = heapq.heappop(heap)
            if seq != self._stamp[index] or not self._member[index]:
                continue
            self._member[index] = False
            self._live -= 1
            return index
        raise IndexError("pop from an empty frontier")

    def __contains__(self, index: int) -> bool:
        return bool(self._member[index])

    def __len__(self) -> int:
        return self._live

    def __bool__(self) -> bool:
        return self._live > 0

    @property
    def heap_size(self) -> int:
        """Entries in the heap including stale ones."""
        return len(self._heap)
# endregion


# region Visited (closed set)
class Visited:
    """Cells expanded during the current search, over the ``in_closed`` buffer."""

    def __init__(self, membership: np.ndarray):
        self._member = membership
        self._count = 0

    def clear(self) -> None:
        self._member.fill(False)
        self._count = 0

    def add(self, index: int) -> None:
        if not self._member[index]:
            self._member[index] = True
            self._count += 1

    def __contains__(self, index: int) -> bool:
        return bool(self._member[index])

    def __len__(self) -> int:
        return self._count
# endregion
