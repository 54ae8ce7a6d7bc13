# region Imports
from __future__ import annotations
from enum import Enum
# endregion


# region Search Outcomes
class SearchError(str, Enum):
    """Negative search outcomes, returned as values by the engine."""

    INVALID_ENDPOINT = "invalid_endpoint"
    NO_PATH_FOUND = "no_path_found"
    ITERATION_CAP_EXCEEDED = "iteration_cap_exceeded"
    RECONSTRUCTION_OVERFLOW = "reconstruction_overflow"

    @property
    def is_fatal(self) -> bool:
        return self is SearchError.RECONSTRUCTION_OVERFLOW

    @property
    def is_no_route(self) -> bool:
        return self in (SearchError.NO_PATH_FOUND, SearchError.ITERATION_CAP_EXCEEDED)
# endregion


# region Exceptions
class PathfindingError(Exception):
    """Base class for everything raised by sky_pathfinder."""

    code: SearchError = None  # type: ignore[assignment]


class InvalidEndpointError(PathfindingError):
    code = SearchError.INVALID_ENDPOINT


class NoPathFoundError(PathfindingError):
    code = SearchError.NO_PATH_FOUND


class IterationCapExceededError(NoPathFoundError):
    code = SearchError.ITERATION_CAP_EXCEEDED


class ReconstructionOverflowError(PathfindingError):
    """Parent chain is longer than any legal path: the links form a cycle."""

    code = SearchError.RECONSTRUCTION_OVERFLOW


class HeightfieldUnavailable(PathfindingError):
    """A height source could not be opened or reached."""


_BY_CODE = {
    SearchError.INVALID_ENDPOINT: InvalidEndpointError,
    SearchError.NO_PATH_FOUND: NoPathFoundError,
    SearchError.ITERATION_CAP_EXCEEDED: IterationCapExceededError,
    SearchError.RECONSTRUCTION_OVERFLOW: ReconstructionOverflowError,
}


def error_for(code: SearchError, message: str = "") -> PathfindingError:
    return _BY_CODE[code](message or code.value.replace("_", " "))
# endregion
