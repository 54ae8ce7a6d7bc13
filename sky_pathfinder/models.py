# models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from .errors import SearchError, error_for

if TYPE_CHECKING:
    from .grid import GridModel


class Coord(NamedTuple):
    x: int
    y: int


class Position(NamedTuple):
    x: float
    y: float
    z: float


def as_coord(value: Sequence[int]) -> Coord:
    x, y = value
    return Coord(int(x), int(y))


def as_position(value: Sequence[float]) -> Position:
    if len(value) == 2:
        # (x, z) on the ground plane
        return Position(float(value[0]), 0.0, float(value[1]))
    x, y, z = value
    return Position(float(x), float(y), float(z))


# region Path
@dataclass(frozen=True)
class Path:
    """Ordered grid cells from start to goal, both inclusive."""

    coords: Tuple[Coord, ...]
    cost: float = 0.0

    def __len__(self) -> int:
        return len(self.coords)

    def __iter__(self) -> Iterator[Coord]:
        return iter(self.coords)

    def __getitem__(self, i):
        return self.coords[i]

    @property
    def start(self) -> Coord:
        return self.coords[0]

    @property
    def end(self) -> Coord:
        return self.coords[-1]

    def to_world(
        self,
        grid: "GridModel",
        height_offset: float = 0.0,
        *,
        follow_terrain: bool = True,
    ) -> List[Position]:
        """Cell centres in world space; y rides ``height_offset`` above the terrain."""
        out = []
        for c in self.coords:
            y = height_offset + (grid.height_at(c) if follow_terrain else 0.0)
            out.append(grid.grid_to_world(c, y))
        return out

    def as_lists(self) -> List[List[int]]:
        return [[c.x, c.y] for c in self.coords]
# endregion


# region Engine Result
@dataclass(frozen=True)
class SearchResult:
    path: Optional[Path]
    error: Optional[SearchError] = None
    iterations: int = 0
    search_id: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def cost(self) -> float:
        return self.path.cost if self.path is not None else float("inf")

    def unwrap(self) -> Path:
        """Return the path or raise the exception matching ``error``."""
        if self.error is not None:
            raise error_for(self.error, self.message)
        return self.path
# endregion


# region Service Requests
@dataclass(frozen=True)
class PathRequest:
    start: Coord
    end: Coord
    fly_cost_multiplier: float
    height_offset: float = 0.0
    request_id: int = 0
    timestamp: float = 0.0


@dataclass
class PathResult:
    request_id: int
    path: Optional[Path] = None
    world_path: List[Position] = field(default_factory=list)
    calculation_time: float = 0.0
    error: Optional[SearchError] = None
    error_message: Optional[str] = None
    legs_cost: List[float] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.error is None and self.path is not None

    @classmethod
    def failed(cls, request_id: int, error: SearchError, reason: str, calculation_time: float = 0.0) -> "PathResult":
        return cls(request_id=request_id, calculation_time=calculation_time,
                   error=error, error_message=reason)

    def to_dict(self) -> dict:
        out = {
            "request_id": self.request_id,
            "success": self.success,
            "calculation_time_ms": round(self.calculation_time * 1000.0, 3),
        }
        if self.success:
            out["cells"] = self.path.as_lists()
            out["total_cost"] = float(self.path.cost)
            out["positions"] = [{"x": p.x, "y": p.y, "z": p.z} for p in self.world_path]
            if self.legs_cost:
                out["legs_cost"] = list(self.legs_cost)
        else:
            out["error"] = self.error.value if self.error else None
            out["message"] = self.error_message
        return out
# endregion
