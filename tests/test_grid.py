"""Tests for GridModel geometry, terrain sampling and walkability."""

from __future__ import annotations

import numpy as np
import pytest

from sky_pathfinder import GridModel
from sky_pathfinder.models import Coord, Position


def test_new_grid_is_flat_and_walkable() -> None:
    grid = GridModel(5, 3, cell_size=2.0)

    assert grid.shape == (3, 5)
    assert grid.size == 15
    assert grid.heights.dtype == np.float32
    assert not grid.heights.any()
    assert grid.walkable.all()


@pytest.mark.parametrize("width,height,cell_size", [(0, 4, 1.0), (4, -1, 1.0), (4, 4, 0.0)])
def test_degenerate_grids_are_rejected(width, height, cell_size) -> None:
    with pytest.raises(ValueError):
        GridModel(width, height, cell_size=cell_size)


def test_flat_index_is_row_major() -> None:
    grid = GridModel(5, 4)

    assert grid.index((3, 2)) == 13
    assert grid.coord(13) == Coord(3, 2)
    assert grid.is_valid((4, 3))
    assert not grid.is_valid((5, 0))
    assert not grid.is_valid((0, -1))


def test_sample_terrain_from_callable_uses_cell_centres() -> None:
    grid = GridModel(2, 2, cell_size=2.0, origin=(10.0, 0.0, 20.0))

    grid.sample_terrain(lambda x, z: x + z)

    np.testing.assert_allclose(grid.heights, [[32.0, 34.0], [34.0, 36.0]])


def test_sample_terrain_rejects_mismatched_array() -> None:
    grid = GridModel(3, 2)

    with pytest.raises(ValueError):
        grid.sample_terrain(np.zeros((3, 2)))


def test_non_finite_samples_block_cells() -> None:
    heights = np.array([[1.0, np.nan], [np.inf, 4.0]])

    grid = GridModel.from_heights(heights)

    assert grid.is_walkable((0, 0)) and grid.is_walkable((1, 1))
    assert not grid.is_walkable((1, 0))
    assert not grid.is_walkable((0, 1))
    assert grid.height_at((1, 0)) == 0.0


def test_from_heights_applies_blocked_mask() -> None:
    blocked = np.array([[False, True], [False, False]])

    grid = GridModel.from_heights(np.ones((2, 2)), cell_size=3.0, blocked=blocked)

    assert grid.cell_size == 3.0
    assert not grid.is_walkable((1, 0))
    assert int(grid.walkable.sum()) == 3


def test_set_walkable_outside_grid_raises(flat_grid) -> None:
    with pytest.raises(ValueError):
        flat_grid.set_walkable((4, 0), False)
    assert not flat_grid.is_walkable((9, 9))


def test_world_round_trip_with_origin() -> None:
    grid = GridModel(8, 8, cell_size=2.0, origin=(-4.0, 5.0, 10.0))

    pos = grid.grid_to_world((3, 1), y_offset=2.0)

    assert pos == Position(3.0, 7.0, 13.0)
    assert grid.world_to_grid(pos) == Coord(3, 1)
    assert grid.world_to_grid((-4.5, 0.0, 9.9)) == Coord(-1, -1)


def test_resampling_unblocks_cells_that_gain_data() -> None:
    grid = GridModel(2, 1)

    grid.sample_terrain([[0.0, np.nan]])
    assert not grid.is_walkable((1, 0))

    grid.sample_terrain([[0.0, 5.0]])
    assert grid.is_walkable((1, 0))
    assert grid.height_at((1, 0)) == 5.0


def test_explicit_blocks_survive_resampling() -> None:
    grid = GridModel(3, 1)
    grid.set_walkable((0, 0), False)
    grid.block_cells([[False, True, False]])

    grid.sample_terrain([[1.0, 2.0, np.nan]])
    assert grid.walkable.tolist() == [[False, False, False]]

    grid.sample_terrain([[1.0, 2.0, 3.0]])
    assert grid.walkable.tolist() == [[False, False, True]]

    grid.set_walkable((0, 0), True)
    assert grid.is_walkable((0, 0))


def test_set_walkable_cannot_override_missing_data() -> None:
    grid = GridModel.from_heights([[np.nan, 1.0]])

    grid.set_walkable((0, 0), True)

    assert not grid.is_walkable((0, 0))
