"""Height-aware A* routing for flying agents over sampled terrain grids."""

from .astar_core import CornerRule, SearchEngine, reconstruct
from .boundary import BoundaryResolver
from .errors import (
    HeightfieldUnavailable,
    InvalidEndpointError,
    IterationCapExceededError,
    NoPathFoundError,
    PathfindingError,
    ReconstructionOverflowError,
    SearchError,
)
from .grid import GridModel
from .logging_utils import get_logger
from .models import Coord, Path, PathRequest, PathResult, Position, SearchResult
from .service import PathfindingService, TargetFollower

__all__ = [
    "BoundaryResolver",
    "Coord",
    "CornerRule",
    "GridModel",
    "HeightfieldUnavailable",
    "InvalidEndpointError",
    "IterationCapExceededError",
    "NoPathFoundError",
    "Path",
    "PathRequest",
    "PathResult",
    "PathfindingError",
    "PathfindingService",
    "Position",
    "ReconstructionOverflowError",
    "SearchEngine",
    "SearchError",
    "SearchResult",
    "TargetFollower",
    "get_logger",
    "reconstruct",
]
