# region Imports
from __future__ import annotations

import math
from typing import Callable, Optional, Sequence, Union

import numpy as np

from .models import Coord, Position, as_position
# endregion

HeightProvider = Union[Callable[[float, float], float], np.ndarray, Sequence[Sequence[float]]]


# region Grid Model
class GridModel:
    """
    Grid geometry plus per-cell terrain height and walkability.

    Arrays are (H, W) so ``heights[y, x]`` is cell (x, y); flat index is
    ``y * W + x``. Built once per terrain and only read during searches.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cell_size: float = 1.0,
        origin: Sequence[float] = (0.0, 0.0, 0.0),
    ):
        if int(width) < 1 or int(height) < 1:
            raise ValueError(f"Grid must be at least 1x1 (got {width}x{height})")
        if not cell_size > 0:
            raise ValueError(f"cell_size must be positive (got {cell_size})")
        self.width = int(width)
        self.height = int(height)
        self.cell_size = float(cell_size)
        self.origin: Position = as_position(origin)
        self.heights = np.zeros((self.height, self.width), dtype=np.float32)
        self.walkable = np.ones((self.height, self.width), dtype=bool)
        # walkable == ~(blocked | no_data); kept apart so resampling can unblock
        self._blocked = np.zeros((self.height, self.width), dtype=bool)
        self._no_data = np.zeros((self.height, self.width), dtype=bool)

    # region Constructors
    @classmethod
    def from_heights(
        cls,
        heights,
        cell_size: float = 1.0,
        origin: Sequence[float] = (0.0, 0.0, 0.0),
        blocked: Optional[np.ndarray] = None,
    ) -> "GridModel":
        arr = np.asarray(heights, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"heights must be 2-D, got shape {arr.shape}")
        H, W = arr.shape
        grid = cls(W, H, cell_size, origin)
        grid.sample_terrain(arr)
        if blocked is not None:
            grid.block_cells(blocked)
        return grid

    @classmethod
    def from_heightfield(cls, field, origin: Sequence[float] = (0.0, 0.0, 0.0), cell_size: Optional[float] = None) -> "GridModel":
        cs = field.cell_size if cell_size is None else cell_size
        return cls.from_heights(field.heights, cs, origin, blocked=~field.valid)
    # endregion

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def shape(self):
        return (self.height, self.width)

    # region Terrain Sampling
    def sample_terrain(self, height_provider: HeightProvider) -> None:
        """
        Fill every cell height from an external height field.

        ``height_provider`` is either an (H, W) array or a callable taking the
        world (x, z) of a cell centre. Non-finite samples mark the cell
        unwalkable and are stored as 0; a later finite sample makes it
        walkable again unless it was blocked explicitly.
        """
        if callable(height_provider):
            xs = self.origin.x + (np.arange(self.width) + 0.5) * self.cell_size
            zs = self.origin.z + (np.arange(self.height) + 0.5) * self.cell_size
            arr = np.empty((self.height, self.width), dtype=np.float64)
            for r, z in enumerate(zs):
                for c, x in enumerate(xs):
                    arr[r, c] = float(height_provider(float(x), float(z)))
        else:
            arr = np.asarray(height_provider, dtype=np.float64)
            if arr.shape != self.shape:
                raise ValueError(f"Height field shape {arr.shape} does not match grid {self.shape}")

        finite = np.isfinite(arr)
        self.heights[:] = np.where(finite, arr, 0.0).astype(np.float32)
        self._no_data[:] = ~finite
        self._refresh_walkable()
    # endregion

    # region Walkability
    def set_walkable(self, coord, walkable: bool) -> None:
        if not self.is_valid(coord):
            raise ValueError(f"Cell {tuple(coord)} is outside the {self.width}x{self.height} grid")
        x, y = coord
        self._blocked[y, x] = not walkable
        self.walkable[y, x] = not (self._blocked[y, x] or self._no_data[y, x])

    def block_cells(self, mask) -> None:
        mask = np.asarray(mask, dtype=bool)
        if mask.shape != self.shape:
            raise ValueError(f"Mask shape {mask.shape} does not match grid {self.shape}")
        self._blocked |= mask
        self._refresh_walkable()

    def _refresh_walkable(self) -> None:
        np.logical_not(self._blocked | self._no_data, out=self.walkable)

    def is_walkable(self, coord) -> bool:
        return self.is_valid(coord) and bool(self.walkable[coord[1], coord[0]])
    # endregion

    # region Index Helpers
    def is_valid(self, coord) -> bool:
        x, y = coord
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, coord) -> int:
        return int(coord[1]) * self.width + int(coord[0])

    def coord(self, i: int) -> Coord:
        return Coord(i % self.width, i // self.width)

    def height_at(self, coord) -> float:
        return float(self.heights[coord[1], coord[0]])
    # endregion

    # region World Conversion
    def grid_to_world(self, coord, y_offset: float = 0.0) -> Position:
        return Position(
            self.origin.x + (coord[0] + 0.5) * self.cell_size,
            self.origin.y + y_offset,
            self.origin.z + (coord[1] + 0.5) * self.cell_size,
        )

    def world_to_grid(self, pos) -> Coord:
        p = as_position(pos)
        return Coord(
            int(math.floor((p.x - self.origin.x) / self.cell_size)),
            int(math.floor((p.z - self.origin.z) / self.cell_size)),
        )
    # endregion

    def __repr__(self) -> str:
        blocked = int((~self.walkable).sum())
        return (f"GridModel({self.width}x{self.height}, cell_size={self.cell_size}, "
                f"origin={tuple(self.origin)}, blocked={blocked})")
# endregion
