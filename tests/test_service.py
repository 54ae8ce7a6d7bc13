"""Tests for the serialised pathfinding service and target following."""

from __future__ import annotations

import numpy as np
import pytest

from sky_pathfinder import GridModel, PathfindingService, SearchError, TargetFollower
from sky_pathfinder.config import PathfinderSettings
from sky_pathfinder.models import Coord, Position
from sky_pathfinder.service import build_grid


@pytest.fixture
def ramp_grid() -> GridModel:
    heights = np.tile(np.arange(10, dtype=np.float32), (10, 1))
    return GridModel.from_heights(heights, cell_size=2.0)


@pytest.fixture
def service(ramp_grid) -> PathfindingService:
    svc = PathfindingService(ramp_grid, fly_cost_multiplier=0.5, height_offset=5.0)
    yield svc
    svc.close()


def test_request_ids_increase_per_service(ramp_grid) -> None:
    a = PathfindingService(ramp_grid)
    b = PathfindingService(ramp_grid)

    assert [a.create_request((0, 0), (1, 1)).request_id for _ in range(3)] == [1, 2, 3]
    assert b.create_request((0, 0), (1, 1)).request_id == 1


def test_request_defaults_come_from_service(service) -> None:
    request = service.create_request([0, 0], [3, 4])

    assert request.start == Coord(0, 0) and request.end == Coord(3, 4)
    assert request.fly_cost_multiplier == 0.5
    assert request.height_offset == 5.0
    assert service.create_request((2, 2), (2, 2), fly_cost_multiplier=2.0).fly_cost_multiplier == 2.0


def test_world_path_rides_above_terrain(service) -> None:
    result = service.find_path((0, 0), (3, 0))

    assert result.success
    assert [tuple(c) for c in result.path] == [(0, 0), (1, 0), (2, 0), (3, 0)]
    assert result.world_path[0] == Position(1.0, 5.0, 1.0)
    assert result.world_path[-1] == Position(7.0, 8.0, 1.0)
    assert result.path.cost == pytest.approx(3 * 2.0 + 3 * 0.5)
    assert result.calculation_time >= 0.0


def test_height_offset_can_be_overridden(service) -> None:
    result = service.find_path((0, 0), (0, 1), height_offset=0.0)

    assert [p.y for p in result.world_path] == [0.0, 0.0]


def test_out_of_range_request_is_clamped(service) -> None:
    result = service.find_path((-4, -4), (20, 0))

    assert result.success
    assert result.path.start == Coord(0, 0)
    assert result.path.end == Coord(9, 0)


def test_strict_service_rejects_out_of_range(ramp_grid) -> None:
    strict = PathfindingService(ramp_grid, clamp=False)

    result = strict.find_path((-1, 0), (3, 3))

    assert not result.success
    assert result.error is SearchError.INVALID_ENDPOINT
    assert result.to_dict()["error"] == "invalid_endpoint"


def test_unwalkable_endpoint_snaps_when_enabled(ramp_grid) -> None:
    ramp_grid.set_walkable((5, 5), False)
    plain = PathfindingService(ramp_grid)
    snapping = PathfindingService(ramp_grid, snap_radius=2)

    assert plain.find_path((0, 5), (5, 5)).error is SearchError.INVALID_ENDPOINT
    snapped = snapping.find_path((0, 5), (5, 5))
    assert snapped.success
    assert snapped.path.end == Coord(5, 4)


def test_request_world_converts_positions(service) -> None:
    result = service.request_world((1.0, 0.0, 1.0), (7.5, 0.0, 1.0))

    assert result.success
    assert result.path.end == Coord(3, 0)


def test_plan_route_chains_legs(service) -> None:
    result = service.plan_route([(0, 0), (3, 0), (3, 3)])

    assert result.success
    cells = [tuple(c) for c in result.path]
    assert cells[0] == (0, 0) and cells[-1] == (3, 3)
    assert cells.count((3, 0)) == 1
    assert len(result.legs_cost) == 2
    assert result.path.cost == pytest.approx(sum(result.legs_cost))
    assert len(result.world_path) == len(cells)
    assert result.to_dict()["legs_cost"] == result.legs_cost


def test_plan_route_reports_failing_leg(ramp_grid) -> None:
    ramp_grid.set_walkable((5, 5), False)
    svc = PathfindingService(ramp_grid)

    result = svc.plan_route([(0, 0), (2, 2), (5, 5)])

    assert result.error is SearchError.INVALID_ENDPOINT
    assert result.error_message.startswith("leg 2:")


def test_plan_route_needs_two_waypoints(service) -> None:
    with pytest.raises(ValueError):
        service.plan_route([(0, 0)])


def test_submit_async_runs_in_background(service) -> None:
    future = service.submit_async(service.create_request((0, 0), (9, 9)))

    result = future.result(timeout=10)

    assert result.success
    assert result.path.end == Coord(9, 9)


def test_describe_reports_grid(service) -> None:
    info = service.describe()

    assert info["width"] == 10 and info["height"] == 10
    assert info["cell_size"] == 2.0
    assert info["walkable_cells"] == 100
    assert info["height_range"] == [0.0, 9.0]
    assert info["corner_rule"] == "any"


def test_build_grid_uses_synthetic_terrain() -> None:
    settings = PathfinderSettings(grid_size=12, cell_size=3.0, synthetic_seed=4)

    grid = build_grid(settings)

    assert (grid.width, grid.height) == (12, 12)
    assert grid.cell_size == 3.0
    assert grid.heights.max() > 0.0


def test_target_follower_replans_only_when_worthwhile() -> None:
    svc = PathfindingService(GridModel(10, 10))
    follower = TargetFollower(svc)

    first = follower.update(0.0, (0.5, 0.0, 0.5), (8.5, 0.0, 8.5))
    assert first is not None and first.success
    assert first.path.end == Coord(8, 8)

    assert follower.update(0.1, (0.5, 0.0, 0.5), (8.5, 0.0, 8.5)) is None
    assert follower.update(1.0, (0.5, 0.0, 0.5), (9.5, 0.0, 8.5)) is None

    second = follower.update(2.0, (4.5, 0.0, 4.5), (8.5, 0.0, 2.5))
    assert second is not None and second.success
    assert second.path.start == Coord(4, 4)
    assert second.path.end == Coord(8, 2)
    assert follower.current is second


def test_target_follower_skips_when_already_there() -> None:
    follower = TargetFollower(PathfindingService(GridModel(4, 4)))

    assert follower.update(0.0, (1.5, 0.0, 1.5), (1.2, 0.0, 1.8)) is None
    assert follower.current is None


def test_build_grid_max_pools_terrain() -> None:
    fine = build_grid(PathfinderSettings(grid_size=16, cell_size=1.0, synthetic_seed=4))
    coarse = build_grid(PathfinderSettings(grid_size=16, cell_size=1.0, synthetic_seed=4, pool_samples=4))

    assert (coarse.width, coarse.height) == (4, 4)
    assert coarse.cell_size == pytest.approx(4.0)
    assert coarse.walkable.all()
    assert coarse.heights.max() == pytest.approx(fine.heights.max())
    assert coarse.heights.min() >= fine.heights.min()
