# region Imports
from __future__ import annotations

from typing import NamedTuple

import numpy as np
# endregion


class NodeCost(NamedTuple):
    g: float
    h: float
    fly: float
    parent: int
    in_open: bool
    in_closed: bool

    @property
    def f(self) -> float:
        return self.g + self.h + self.fly


# region Search State
class SearchState:
    """
    Per-cell cost, parent and set-membership buffers for one engine.

    Allocated once and cleared in place by ``reset()``, which must run
    before every search so nothing leaks from the previous one.
    """

    def __init__(self, size: int):
        if size < 1:
            raise ValueError(f"SearchState needs at least one cell (got {size})")
        self.size = int(size)
        self.g = np.empty(self.size, dtype=np.float64)
        self.h = np.empty(self.size, dtype=np.float64)
        self.fly = np.empty(self.size, dtype=np.float64)
        self.parent = np.empty(self.size, dtype=np.int32)
        self.in_open = np.empty(self.size, dtype=bool)
        self.in_closed = np.empty(self.size, dtype=bool)
        self.reset()

    def reset(self) -> None:
        self.g.fill(np.inf)
        self.h.fill(0.0)
        self.fly.fill(0.0)
        self.parent.fill(-1)
        self.in_open.fill(False)
        self.in_closed.fill(False)

    def f(self, i: int) -> float:
        return float(self.g[i] + self.h[i] + self.fly[i])

    def node(self, i: int) -> NodeCost:
        return NodeCost(
            float(self.g[i]), float(self.h[i]), float(self.fly[i]),
            int(self.parent[i]), bool(self.in_open[i]), bool(self.in_closed[i]),
        )

    def is_pristine(self) -> bool:
        return bool(
            np.isinf(self.g).all()
            and not self.h.any()
            and not self.fly.any()
            and (self.parent == -1).all()
            and not self.in_open.any()
            and not self.in_closed.any()
        )
# endregion
