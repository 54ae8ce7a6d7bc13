# region Imports and Typing
from __future__ import annotations

import itertools
import math
import threading
from enum import Enum
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .config import DEFAULT_FLY_COST_MULTIPLIER, SQRT2
from .costs import fly_cost
from .errors import ReconstructionOverflowError, SearchError
from .frontier import Frontier, Visited
from .geometry import octile_distance
from .logging_utils import get_logger
from .models import Coord, Path, SearchResult, as_coord
from .search_state import SearchState
# endregion

LOGGER = get_logger(__name__)


class CornerRule(str, Enum):
    """When a diagonal step may pass between its two cardinal cells."""

    ANY = "any"     # at least one of them walkable
    BOTH = "both"   # both walkable


# dy outer, dx inner: fixed expansion order keeps results reproducible
_OFFSETS = tuple((dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0))


# region Neighbor Generation
def neighbors_8(u, walkable: np.ndarray, corner_rule: CornerRule = CornerRule.ANY) -> Iterator[Tuple[int, int, bool]]:
    """Yield (x, y, diagonal) for every enterable neighbour of cell u."""
    x, y = u
    H, W = walkable.shape
    need_both = corner_rule is CornerRule.BOTH
    for dx, dy in _OFFSETS:
        nx, ny = x + dx, y + dy
        if not (0 <= nx < W and 0 <= ny < H):
            continue
        if not walkable[ny, nx]:
            continue
        diagonal = dx != 0 and dy != 0
        if diagonal:
            side_a = walkable[y, nx]
            side_b = walkable[ny, x]
            if need_both:
                if not (side_a and side_b):
                    continue
            elif not (side_a or side_b):
                continue
        yield nx, ny, diagonal
# endregion


# region Path Reconstruction
def reconstruct(parent: np.ndarray, goal: int, width: int, max_path_length: int) -> List[Coord]:
    """Walk parent links back from ``goal`` to the root (-1) and reverse."""
    path = []
    v = int(goal)
    while v != -1:
        if len(path) >= max_path_length:
            raise ReconstructionOverflowError(
                f"Parent chain from cell {goal} exceeds {max_path_length} nodes; parent links form a cycle"
            )
        path.append(Coord(v % width, v // width))
        v = int(parent[v])
    path.reverse()
    return path
# endregion


# region A* Search Engine
class SearchEngine:
    """
    Height-aware A* over a GridModel.

    Cost of a move is step length (1 or sqrt2, times cell_size) plus
    ``max(0, climb) * fly_cost_multiplier``. Cells are popped by
    f = g + h + fly with ties going to the smaller h. The octile heuristic
    ignores climb cost, so heavy elevation penalties can yield a path that is
    not the cheapest overall.

    Buffers are allocated here and reused; an engine runs one search at a
    time. Use one engine per concurrent caller or serialise through a
    PathfindingService.
    """

    def __init__(
        self,
        grid,
        *,
        resolver=None,
        max_iterations: Optional[int] = None,
        max_path_length: Optional[int] = None,
        corner_rule: CornerRule = CornerRule.ANY,
    ):
        self.grid = grid
        self.resolver = resolver
        self.max_iterations = int(max_iterations) if max_iterations else grid.size
        self.max_path_length = int(max_path_length) if max_path_length else grid.size
        self.corner_rule = CornerRule(corner_rule)

        self.state = SearchState(grid.size)
        self.frontier = Frontier(self.state.in_open)
        self.visited = Visited(self.state.in_closed)

        self._search_ids = itertools.count(1)
        self._busy = threading.Lock()
        LOGGER.debug(
            "SearchEngine ready for %dx%d grid (max_iterations=%d, corner_rule=%s)",
            grid.width, grid.height, self.max_iterations, self.corner_rule.value,
        )

    def heuristic(self, a, b) -> float:
        return octile_distance(a[0], a[1], b[0], b[1], self.grid.cell_size)

    def find_path(
        self,
        start,
        end,
        fly_cost_multiplier: float = DEFAULT_FLY_COST_MULTIPLIER,
        *,
        max_iterations: Optional[int] = None,
    ) -> SearchResult:
        """Search from ``start`` to ``end`` (grid cells). Failures come back as values."""
        if not math.isfinite(fly_cost_multiplier) or fly_cost_multiplier < 0:
            raise ValueError(f"fly_cost_multiplier must be finite and >= 0 (got {fly_cost_multiplier})")
        if max_iterations is not None and max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1 (got {max_iterations})")
        if not self._busy.acquire(blocking=False):
            raise RuntimeError("SearchEngine is already running a search; its buffers are not reentrant")
        try:
            return self._search(as_coord(start), as_coord(end), float(fly_cost_multiplier),
                                max_iterations or self.max_iterations)
        finally:
            self._busy.release()

    # region Endpoint Checks
    def _check_endpoints(self, start: Coord, end: Coord) -> Optional[str]:
        grid = self.grid
        for label, c in (("start", start), ("end", end)):
            if not grid.is_valid(c):
                return f"{label} {tuple(c)} is outside the {grid.width}x{grid.height} grid"
            if not grid.is_walkable(c):
                return f"{label} {tuple(c)} is not walkable"
        return None
    # endregion

    def _search(self, start: Coord, end: Coord, multiplier: float, cap: int) -> SearchResult:
        search_id = next(self._search_ids)
        grid = self.grid

        if self.resolver is not None and self.resolver.clamp_enabled:
            c_start, c_end = self.resolver.clamp(start), self.resolver.clamp(end)
            if (c_start, c_end) != (start, end):
                LOGGER.warning("Search %d: endpoints clamped %s->%s, %s->%s",
                               search_id, tuple(start), tuple(c_start), tuple(end), tuple(c_end))
            start, end = c_start, c_end

        problem = self._check_endpoints(start, end)
        if problem is not None:
            LOGGER.info("Search %d rejected: %s", search_id, problem)
            return SearchResult(None, SearchError.INVALID_ENDPOINT, 0, search_id, problem)

        # region Reset
        state, frontier, visited = self.state, self.frontier, self.visited
        state.reset()
        frontier.clear()
        visited.clear()
        # endregion

        W, H = grid.width, grid.height
        cs = grid.cell_size
        diag_step = SQRT2 * cs
        heights = grid.heights.reshape(-1)
        walkable = grid.walkable
        corner_rule = self.corner_rule
        g, h, fly, parent, closed = state.g, state.h, state.fly, state.parent, state.in_closed
        ex, ey = end

        s = start[1] * W + start[0]
        t = end[1] * W + end[0]
        g[s] = 0.0
        h[s] = octile_distance(start[0], start[1], ex, ey, cs)
        fly[s] = 0.0
        parent[s] = -1
        frontier.push(s, float(h[s]), float(h[s]))

        iterations = 0
        while frontier and iterations < cap:
            u = frontier.pop()
            iterations += 1
            visited.add(u)

            if u == t:
                return self._finish(search_id, u, iterations, start, end)

            ux, uy = u % W, u // W
            gu = float(g[u])
            hu = float(heights[u])

            # region Neighbor Loop
            for nx, ny, diagonal in neighbors_8((ux, uy), walkable, corner_rule):
                v = ny * W + nx
                if closed[v]:
                    continue
                climb = fly_cost(hu, float(heights[v]), multiplier)
                tentative = gu + (diag_step if diagonal else cs) + climb
                if tentative < g[v]:
                    hv = octile_distance(nx, ny, ex, ey, cs)
                    g[v] = tentative
                    fly[v] = climb
                    h[v] = hv
                    parent[v] = u
                    frontier.push(v, tentative + hv + climb, hv)
            # endregion

        if frontier:
            msg = f"iteration cap {cap} reached with {len(frontier)} cells still open"
            LOGGER.warning("Search %d %s->%s: %s", search_id, tuple(start), tuple(end), msg)
            return SearchResult(None, SearchError.ITERATION_CAP_EXCEEDED, iterations, search_id, msg)

        msg = f"no route from {tuple(start)} to {tuple(end)}"
        LOGGER.info("Search %d: %s after %d expansions", search_id, msg, iterations)
        return SearchResult(None, SearchError.NO_PATH_FOUND, iterations, search_id, msg)

    def _finish(self, search_id: int, goal: int, iterations: int, start: Coord, end: Coord) -> SearchResult:
        try:
            coords = reconstruct(self.state.parent, goal, self.grid.width, self.max_path_length)
        except ReconstructionOverflowError as exc:
            LOGGER.error("Search %d %s->%s: %s", search_id, tuple(start), tuple(end), exc)
            return SearchResult(None, SearchError.RECONSTRUCTION_OVERFLOW, iterations, search_id, str(exc))
        path = Path(tuple(coords), float(self.state.g[goal]))
        LOGGER.debug("Search %d %s->%s: %d cells, cost=%.3f, expansions=%d",
                     search_id, tuple(start), tuple(end), len(path), path.cost, iterations)
        return SearchResult(path, None, iterations, search_id)
# endregion
