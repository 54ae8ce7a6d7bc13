# region Imports
from dataclasses import dataclass
from typing import Sequence, Tuple

from .geometry import is_adjacent, step_length
# endregion


# region Cost Terms
def fly_cost(h_from: float, h_to: float, multiplier: float) -> float:
    """Climb penalty; descending or level moves cost nothing extra."""
    delta = h_to - h_from
    return delta * multiplier if delta > 0.0 else 0.0
# endregion


# region Path Cost Evaluation
@dataclass
class CostBreakdown:
    distance: float = 0.0
    climb: float = 0.0
    ascent: float = 0.0
    descent: float = 0.0

    @property
    def total(self) -> float:
        return self.distance + self.climb

    def to_dict(self) -> dict:
        return {
            "distance": self.distance,
            "climb_penalty": self.climb,
            "ascent": self.ascent,
            "descent": self.descent,
            "total": self.total,
        }


def cost_breakdown(grid, coords: Sequence[Tuple[int, int]], fly_cost_multiplier: float) -> CostBreakdown:
    out = CostBreakdown()
    if not coords or len(coords) < 2:
        return out
    heights = grid.heights
    for u, v in zip(coords[:-1], coords[1:]):
        if not is_adjacent(u, v):
            raise ValueError(f"Cells {tuple(u)} and {tuple(v)} are not neighbours")
        out.distance += step_length(v[0] - u[0], v[1] - u[1], grid.cell_size)
        h0 = float(heights[u[1], u[0]])
        h1 = float(heights[v[1], v[0]])
        out.climb += fly_cost(h0, h1, fly_cost_multiplier)
        if h1 > h0:
            out.ascent += h1 - h0
        else:
            out.descent += h0 - h1
    return out


def path_cost(grid, coords, fly_cost_multiplier: float) -> float:
    return cost_breakdown(grid, coords, fly_cost_multiplier).total
# endregion
