# region Imports
from __future__ import annotations

import math
from typing import Sequence, Tuple

from .models import Coord, Position, as_coord, as_position
# endregion


# region Boundary Resolver
class BoundaryResolver:
    """
    Stateless world <-> grid conversion over a fixed (W, H, cell_size, origin).

    ``clamp`` selects the behaviour of ``resolve``/``world_to_grid``: a
    clamping resolver pulls out-of-range cells onto the nearest edge, an
    unclamped one hands them back untouched so ``is_valid`` can reject them.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cell_size: float = 1.0,
        origin: Sequence[float] = (0.0, 0.0, 0.0),
        *,
        clamp: bool = True,
    ):
        self.width = int(width)
        self.height = int(height)
        self.cell_size = float(cell_size)
        self.origin: Position = as_position(origin)
        self.clamp_enabled = bool(clamp)

    @classmethod
    def for_grid(cls, grid, *, clamp: bool = True) -> "BoundaryResolver":
        return cls(grid.width, grid.height, grid.cell_size, grid.origin, clamp=clamp)

    # region Grid Space
    def is_valid(self, coord) -> bool:
        x, y = coord
        return 0 <= x < self.width and 0 <= y < self.height

    def clamp(self, coord) -> Coord:
        x, y = as_coord(coord)
        return Coord(min(max(x, 0), self.width - 1), min(max(y, 0), self.height - 1))

    def resolve(self, coord) -> Coord:
        return self.clamp(coord) if self.clamp_enabled else as_coord(coord)

    def distance_to_boundary(self, coord) -> int:
        """Cells to the nearest edge; 0 on the edge itself, negative outside."""
        x, y = coord
        return min(x, self.width - 1 - x, y, self.height - 1 - y)
    # endregion

    # region World Space
    def world_to_grid_unclamped(self, pos) -> Coord:
        p = as_position(pos)
        return Coord(
            int(math.floor((p.x - self.origin.x) / self.cell_size)),
            int(math.floor((p.z - self.origin.z) / self.cell_size)),
        )

    def world_to_grid_clamped(self, pos) -> Coord:
        return self.clamp(self.world_to_grid_unclamped(pos))

    def world_to_grid(self, pos) -> Coord:
        if self.clamp_enabled:
            return self.world_to_grid_clamped(pos)
        return self.world_to_grid_unclamped(pos)

    def nearest_valid(self, pos) -> Tuple[Coord, bool]:
        """Clamped cell for ``pos`` and whether clamping had to move it."""
        raw = self.world_to_grid_unclamped(pos)
        clamped = self.clamp(raw)
        return clamped, clamped != raw

    def grid_to_world(self, coord, y_offset: float = 0.0) -> Position:
        return Position(
            self.origin.x + (coord[0] + 0.5) * self.cell_size,
            self.origin.y + y_offset,
            self.origin.z + (coord[1] + 0.5) * self.cell_size,
        )
    # endregion

    def describe(self) -> str:
        return f"Grid boundaries: (0,0) to ({self.width - 1},{self.height - 1})"
# endregion
