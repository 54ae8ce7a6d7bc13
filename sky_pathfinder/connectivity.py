# region Imports
from .models import Coord, as_coord
# endregion


# region Nearest Walkable Cell Search
def nearest_walkable(grid, coord, max_radius: int = 25) -> Coord:
    """
    Closest walkable cell to ``coord`` by squared distance, searching square
    rings of growing radius. Returns ``coord`` unchanged when it is already
    walkable or nothing walkable lies within ``max_radius``.
    """
    x, y = as_coord(coord)
    W, H = grid.width, grid.height
    walkable = grid.walkable

    if grid.is_walkable((x, y)):
        return Coord(x, y)

    best = None
    best_d2 = None

    for rad in range(1, max_radius + 1):
        y0, y1 = max(0, y - rad), min(H - 1, y + rad)
        x0, x1 = max(0, x - rad), min(W - 1, x + rad)
        for yy in range(y0, y1 + 1):
            for xx in range(x0, x1 + 1):
                if walkable[yy, xx]:
                    d2 = (xx - x) * (xx - x) + (yy - y) * (yy - y)
                    if best_d2 is None or d2 < best_d2:
                        best = Coord(xx, yy)
                        best_d2 = d2
        if best is not None:
            return best

    return Coord(x, y)
# endregion
