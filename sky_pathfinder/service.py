"""Serialised pathfinding front door shared by the API, the CLI and callers.

One GridModel, one SearchEngine and one BoundaryResolver live behind a lock,
so concurrent requests queue up instead of trampling the engine's buffers.
Request ids come from the service instance; there is no process-wide counter.
"""

# region Imports
from __future__ import annotations

import itertools
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Sequence

import numpy as np

from .astar_core import CornerRule, SearchEngine
from .boundary import BoundaryResolver
from .config import DEFAULT_FLY_COST_MULTIPLIER, DEFAULT_HEIGHT_OFFSET, PathfinderSettings
from .connectivity import nearest_walkable
from .dem import Heightfield, pool_heightfield, read_heightfield, synthetic_heights
from .errors import SearchError
from .geometry import horiz_dist
from .grid import GridModel
from .logging_utils import get_logger
from .models import Coord, Path, PathRequest, PathResult, as_coord, as_position
from .throttle import ReplanThrottle
# endregion

LOGGER = get_logger(__name__)


# region Grid Construction
def build_grid(settings: PathfinderSettings) -> GridModel:
    """
    Terrain from ``heightfield_source`` if set, synthetic hills otherwise,
    max-pooled to ``pool_samples`` cells per side when that is set.
    """
    n = settings.grid_size
    if settings.heightfield_source:
        field = read_heightfield(settings.heightfield_source, out_shape=(n, n))
    else:
        heights = synthetic_heights(n, n, seed=settings.synthetic_seed)
        field = Heightfield(heights, np.ones(heights.shape, dtype=bool), settings.cell_size)
    if settings.pool_samples and settings.pool_samples < n:
        field = pool_heightfield(field, settings.pool_samples)
    grid = GridModel.from_heightfield(field, origin=settings.origin)
    LOGGER.info("Built %r", grid)
    return grid
# endregion


# region Pathfinding Service
class PathfindingService:
    def __init__(
        self,
        grid: GridModel,
        *,
        fly_cost_multiplier: float = DEFAULT_FLY_COST_MULTIPLIER,
        height_offset: float = DEFAULT_HEIGHT_OFFSET,
        clamp: bool = True,
        snap_radius: int = 0,
        corner_rule: CornerRule = CornerRule.ANY,
        max_iterations: Optional[int] = None,
    ):
        self.grid = grid
        self.fly_cost_multiplier = float(fly_cost_multiplier)
        self.height_offset = float(height_offset)
        self.snap_radius = int(snap_radius)
        self.resolver = BoundaryResolver.for_grid(grid, clamp=clamp)
        self.engine = SearchEngine(grid, resolver=self.resolver, max_iterations=max_iterations,
                                   corner_rule=corner_rule)
        self._lock = threading.Lock()
        self._request_ids = itertools.count(1)
        self._executor: Optional[ThreadPoolExecutor] = None

    @classmethod
    def from_settings(cls, settings: PathfinderSettings, grid: Optional[GridModel] = None) -> "PathfindingService":
        return cls(
            grid if grid is not None else build_grid(settings),
            fly_cost_multiplier=settings.fly_cost_multiplier,
            height_offset=settings.height_offset,
            clamp=settings.clamp_to_bounds,
            snap_radius=settings.snap_radius,
            corner_rule=CornerRule(settings.corner_rule),
        )

    # region Requests
    def create_request(
        self,
        start,
        end,
        fly_cost_multiplier: Optional[float] = None,
        height_offset: Optional[float] = None,
    ) -> PathRequest:
        return PathRequest(
            start=as_coord(start),
            end=as_coord(end),
            fly_cost_multiplier=self.fly_cost_multiplier if fly_cost_multiplier is None else float(fly_cost_multiplier),
            height_offset=self.height_offset if height_offset is None else float(height_offset),
            request_id=next(self._request_ids),
            timestamp=time.time(),
        )

    def _prepare(self, c: Coord) -> Coord:
        c = self.resolver.resolve(c)
        if self.snap_radius > 0 and self.grid.is_valid(c) and not self.grid.is_walkable(c):
            snapped = nearest_walkable(self.grid, c, self.snap_radius)
            if snapped != c:
                LOGGER.info("Snapped unwalkable cell %s to %s", tuple(c), tuple(snapped))
            c = snapped
        return c

    def submit(self, request: PathRequest) -> PathResult:
        """Run one request against the shared engine, waiting for the lock."""
        t0 = time.perf_counter()
        start, end = self._prepare(request.start), self._prepare(request.end)
        with self._lock:
            result = self.engine.find_path(start, end, request.fly_cost_multiplier)
        elapsed = time.perf_counter() - t0

        if not result.ok:
            return PathResult.failed(request.request_id, result.error, result.message, elapsed)

        LOGGER.debug("Request %d solved in %.2f ms", request.request_id, elapsed * 1000.0)
        return PathResult(
            request_id=request.request_id,
            path=result.path,
            world_path=result.path.to_world(self.grid, request.height_offset),
            calculation_time=elapsed,
        )

    def find_path(self, start, end, **kwargs) -> PathResult:
        return self.submit(self.create_request(start, end, **kwargs))

    def request_world(self, start_pos, end_pos, **kwargs) -> PathResult:
        """Like ``find_path`` but from world positions, converted by the resolver."""
        start = self.resolver.world_to_grid(as_position(start_pos))
        end = self.resolver.world_to_grid(as_position(end_pos))
        return self.find_path(start, end, **kwargs)
    # endregion

    # region Multi-leg Routes
    def plan_route(
        self,
        waypoints: Sequence,
        fly_cost_multiplier: Optional[float] = None,
        height_offset: Optional[float] = None,
    ) -> PathResult:
        """Chain legs between consecutive waypoints (grid cells) into one path."""
        if len(waypoints) < 2:
            raise ValueError("A route needs at least two waypoints")
        t0 = time.perf_counter()
        route_id = next(self._request_ids)
        offset = self.height_offset if height_offset is None else float(height_offset)

        coords: List[Coord] = []
        legs: List[float] = []
        for i in range(len(waypoints) - 1):
            leg = self.find_path(waypoints[i], waypoints[i + 1], fly_cost_multiplier=fly_cost_multiplier,
                                 height_offset=offset)
            if not leg.success:
                return PathResult.failed(route_id, leg.error, f"leg {i + 1}: {leg.error_message}",
                                         time.perf_counter() - t0)
            cells = list(leg.path)
            if coords and coords[-1] == cells[0]:
                cells = cells[1:]
            coords.extend(cells)
            legs.append(leg.path.cost)

        path = Path(tuple(coords), float(sum(legs)))
        return PathResult(
            request_id=route_id,
            path=path,
            world_path=path.to_world(self.grid, offset),
            calculation_time=time.perf_counter() - t0,
            legs_cost=legs,
        )
    # endregion

    # region Background Dispatch
    def submit_async(self, request: PathRequest) -> "Future[PathResult]":
        """Queue a request on the service's single worker thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sky-pathfinder")
        return self._executor.submit(self.submit, request)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "PathfindingService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
    # endregion

    def describe(self) -> dict:
        grid = self.grid
        return {
            "width": grid.width,
            "height": grid.height,
            "cell_size": grid.cell_size,
            "origin": list(grid.origin),
            "walkable_cells": int(grid.walkable.sum()),
            "height_range": [float(grid.heights.min()), float(grid.heights.max())],
            "clamp_to_bounds": self.resolver.clamp_enabled,
            "corner_rule": self.engine.corner_rule.value,
            "fly_cost_multiplier": self.fly_cost_multiplier,
            "boundaries": self.resolver.describe(),
        }
# endregion


# region Target Following
class TargetFollower:
    """Replans toward a moving target through a service, gated by a ReplanThrottle."""

    def __init__(self, service: PathfindingService, throttle: Optional[ReplanThrottle] = None):
        self.service = service
        self.throttle = throttle or ReplanThrottle()
        self.current: Optional[PathResult] = None

    def update(self, now: float, agent_pos, target_pos) -> Optional[PathResult]:
        """Return a fresh PathResult when a replan happened, else None."""
        resolver = self.service.resolver
        agent_pos, target_pos = as_position(agent_pos), as_position(target_pos)
        start = resolver.world_to_grid(agent_pos)
        target = resolver.world_to_grid(target_pos)
        active = self.current is not None and self.current.success

        distance = horiz_dist(agent_pos.x, agent_pos.z, target_pos.x, target_pos.z) if active else None
        if not self.throttle.should_replan(now, target, start if active else None, distance):
            return None
        if start == target:
            LOGGER.debug("Agent already at target cell %s", tuple(target))
            self.throttle.mark(now, target)
            return None

        self.throttle.mark(now, target, start)
        result = self.service.find_path(start, target)
        if result.success:
            self.current = result
        elif result.error is not SearchError.INVALID_ENDPOINT:
            self.current = None
        return result
# endregion
