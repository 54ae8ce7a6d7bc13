"""Tests for the value types passed between engine, service and API."""

from __future__ import annotations

import math

import pytest

from sky_pathfinder import GridModel, Path, PathResult, SearchError, SearchResult
from sky_pathfinder.errors import NoPathFoundError, error_for
from sky_pathfinder.models import Coord, Position, as_coord, as_position


def test_coercion_helpers() -> None:
    assert as_coord([2.0, 3.0]) == Coord(2, 3)
    assert as_position((1, 2)) == Position(1.0, 0.0, 2.0)
    assert as_position([1, 2, 3]) == Position(1.0, 2.0, 3.0)


def test_path_sequence_protocol() -> None:
    path = Path((Coord(0, 0), Coord(1, 1)), cost=math.sqrt(2.0))

    assert len(path) == 2
    assert path[1] == Coord(1, 1)
    assert path.start == Coord(0, 0) and path.end == Coord(1, 1)
    assert path.as_lists() == [[0, 0], [1, 1]]


def test_to_world_can_ignore_terrain() -> None:
    grid = GridModel.from_heights([[4.0, 8.0]], cell_size=2.0, origin=(0.0, 1.0, 0.0))
    path = Path((Coord(0, 0), Coord(1, 0)))

    riding = path.to_world(grid, 3.0)
    level = path.to_world(grid, 3.0, follow_terrain=False)

    assert [p.y for p in riding] == [8.0, 12.0]
    assert [p.y for p in level] == [4.0, 4.0]
    assert riding[1].x == 3.0


def test_failed_search_result() -> None:
    result = SearchResult(None, SearchError.NO_PATH_FOUND, iterations=5, message="walled in")

    assert not result.ok
    assert result.cost == math.inf
    with pytest.raises(NoPathFoundError, match="walled in"):
        result.unwrap()


def test_error_for_falls_back_to_code_text() -> None:
    exc = error_for(SearchError.ITERATION_CAP_EXCEEDED)

    assert exc.code is SearchError.ITERATION_CAP_EXCEEDED
    assert str(exc) == "iteration cap exceeded"


def test_failed_path_result_serialises_error() -> None:
    result = PathResult.failed(7, SearchError.NO_PATH_FOUND, "no route", 0.0021)

    assert not result.success
    assert result.to_dict() == {
        "request_id": 7,
        "success": False,
        "calculation_time_ms": 2.1,
        "error": "no_path_found",
        "message": "no route",
    }
