# region Imports
import math
from .config import SQRT2
# endregion

_OCTILE_K = SQRT2 - 1.0


# region Octile Heuristic
def octile_distance(ax: int, ay: int, bx: int, by: int, cell_size: float = 1.0) -> float:
    """max(dx,dy) + (sqrt2-1)*min(dx,dy), in world units."""
    dx = abs(ax - bx)
    dy = abs(ay - by)
    if dx > dy:
        return (dx + _OCTILE_K * dy) * cell_size
    return (dy + _OCTILE_K * dx) * cell_size


def heuristic(a, b, cell_size: float = 1.0) -> float:
    return octile_distance(a[0], a[1], b[0], b[1], cell_size)
# endregion


# region Step Length
def step_length(dx: int, dy: int, cell_size: float = 1.0) -> float:
    base = SQRT2 if (dx != 0 and dy != 0) else 1.0
    return base * cell_size


def is_adjacent(a, b) -> bool:
    """8-connected neighbours; a cell is not its own neighbour."""
    dx = abs(a[0] - b[0])
    dy = abs(a[1] - b[1])
    return dx <= 1 and dy <= 1 and (dx, dy) != (0, 0)
# endregion


# region World Distance
def horiz_dist(x0: float, z0: float, x1: float, z1: float) -> float:
    return math.hypot(x1 - x0, z1 - z0)
# endregion
