# region Imports
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .models import Coord, as_coord
# endregion


# region Throttle Settings
@dataclass
class ThrottleSettings:
    min_interval: float = 0.5            # seconds between replans at close range
    target_move_threshold: float = 2.0   # grid cells the target must move
    start_move_threshold: float = 3.0    # grid cells the agent must move
    distance_throttling: bool = True
    max_throttle_distance: float = 50.0  # world distance where the multiplier peaks
    max_throttle_multiplier: float = 3.0
# endregion


def _cell_distance(a: Coord, b: Coord) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


# region Replan Throttle
class ReplanThrottle:
    """
    Decides when a target-following caller should issue a new search.

    The engine never interrupts itself, so callers chasing a moving target
    replan at most every ``min_interval`` seconds (stretched up to
    ``max_throttle_multiplier`` times when far away) and only once the
    target, and the agent if it has moved off the last start, moved enough.
    """

    def __init__(self, settings: Optional[ThrottleSettings] = None):
        self.settings = settings or ThrottleSettings()
        self.last_time: Optional[float] = None
        self.last_target: Optional[Coord] = None
        self.last_start: Optional[Coord] = None

    def multiplier(self, distance: Optional[float]) -> float:
        s = self.settings
        if not s.distance_throttling or distance is None or s.max_throttle_distance <= 0:
            return 1.0
        t = min(max(distance / s.max_throttle_distance, 0.0), 1.0)
        return 1.0 + (s.max_throttle_multiplier - 1.0) * t

    def interval(self, distance: Optional[float] = None) -> float:
        return self.settings.min_interval * self.multiplier(distance)

    def should_replan(self, now: float, target, start=None, distance: Optional[float] = None) -> bool:
        """
        ``distance`` is the current world distance between agent and target;
        pass None when no path is active so no throttling stretch applies.
        """
        if self.last_time is None:
            return True
        if now - self.last_time < self.interval(distance):
            return False
        target = as_coord(target)
        if self.last_target is not None and \
                _cell_distance(target, self.last_target) < self.settings.target_move_threshold:
            return False
        if start is not None and self.last_start is not None:
            if _cell_distance(as_coord(start), self.last_start) < self.settings.start_move_threshold:
                return False
        return True

    def mark(self, now: float, target, start=None) -> None:
        self.last_time = now
        self.last_target = as_coord(target)
        if start is not None:
            self.last_start = as_coord(start)

    def reset(self) -> None:
        self.last_time = None
        self.last_target = None
        self.last_start = None
# endregion
