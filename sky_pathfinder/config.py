# config.py
from __future__ import annotations

import math
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SQRT2 = math.sqrt(2.0)

# Extra cost per world unit of climb
DEFAULT_FLY_COST_MULTIPLIER = 1.25

# Agents fly this far above the sampled terrain
DEFAULT_HEIGHT_OFFSET = 10.0

# 0 disables snapping of unwalkable endpoints
DEFAULT_SNAP_RADIUS = 0


# region Runtime Settings
class PathfinderSettings(BaseSettings):
    """Runtime configuration for the pathfinding service, API and CLI."""

    grid_size: int = Field(64, ge=1, le=4096, description="Cells per side of the search grid.")
    cell_size: float = Field(1.0, gt=0.0, description="World units per grid cell.")
    origin: Tuple[float, float, float] = Field(
        (0.0, 0.0, 0.0), description="World-space corner of cell (0, 0)."
    )
    fly_cost_multiplier: float = Field(DEFAULT_FLY_COST_MULTIPLIER, ge=0.0)
    height_offset: float = Field(DEFAULT_HEIGHT_OFFSET)
    clamp_to_bounds: bool = Field(
        True, description="Clamp out-of-range endpoints instead of rejecting them."
    )
    snap_radius: int = Field(DEFAULT_SNAP_RADIUS, ge=0)
    corner_rule: str = Field("any", description="Diagonal corner rule: 'any' or 'both'.")
    heightfield_source: Optional[str] = Field(
        None, description="GeoTIFF path or COG URL. Synthetic terrain is used when unset."
    )
    synthetic_seed: int = Field(0)
    pool_samples: Optional[int] = Field(
        None, ge=1, description="Max-pool the sampled terrain down to this many cells per side."
    )
    host: str = Field("127.0.0.1")
    port: int = Field(8081, ge=1, le=65535)
    log_level: str = Field("INFO")

    model_config = SettingsConfigDict(
        env_prefix="SKYPATH_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    @field_validator("corner_rule")
    @classmethod
    def _check_corner_rule(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("any", "both"):
            raise ValueError("corner_rule must be 'any' or 'both'")
        return value

    @field_validator("heightfield_source")
    @classmethod
    def _expand_source(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if value.startswith(("http://", "https://")):
            return value
        return str(Path(value).expanduser())

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def _check_pool_samples(self) -> "PathfinderSettings":
        if self.pool_samples is not None and self.pool_samples > self.grid_size:
            raise ValueError("pool_samples cannot exceed grid_size")
        return self


@lru_cache()
def get_settings() -> PathfinderSettings:
    """Return cached settings read from the environment."""

    return PathfinderSettings()
# endregion
