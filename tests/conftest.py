"""Shared grids for the test suite.

Structure:
    * flat_grid - 4x4 zero-height grid, cell size 1.
    * column_grid - 4x4 grid with a height-100 column at x=2 for y in 0..2.
"""

from __future__ import annotations

import numpy as np
import pytest

from sky_pathfinder import GridModel


@pytest.fixture
def flat_grid() -> GridModel:
    return GridModel(4, 4, cell_size=1.0)


@pytest.fixture
def column_grid() -> GridModel:
    heights = np.zeros((4, 4), dtype=np.float32)
    heights[0:3, 2] = 100.0
    return GridModel.from_heights(heights)


@pytest.fixture
def walled_grid() -> GridModel:
    """8x8 flat grid split by a wall at x=4 with a gap at y=7."""

    grid = GridModel(8, 8)
    for y in range(7):
        grid.set_walkable((4, y), False)
    return grid
