# dem.py
# Height providers that feed GridModel.sample_terrain.
#
# Exposes:
#   - Heightfield                 (data container)
#   - synthetic_heights(H, W, seed, ...)
#   - read_heightfield(source, out_shape=None, window=None)
#   - max_pool_heights(heights, samples_per_side)
#   - pool_heightfield(field, samples_per_side)
#
# Dependencies: numpy, rasterio (GeoTIFF/COG), requests (remote probe)

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import HeightfieldUnavailable
from .logging_utils import get_logger

LOGGER = get_logger(__name__)


# region Data Container
@dataclass
class Heightfield:
    """
    heights:   elevation per cell, (H, W) float32; 0 where invalid
    valid:     True where the source had data, (H, W) bool
    cell_size: approximate ground size of one cell in source units
    """
    heights: np.ndarray
    valid: np.ndarray
    cell_size: float = 1.0

    @property
    def shape(self) -> Tuple[int, int]:
        return self.heights.shape
# endregion


# region Synthetic Terrain
def synthetic_heights(
    H: int = 64,
    W: int = 64,
    seed: int = 0,
    relief: float = 40.0,
    n_peaks: int = 4,
    noise: float = 1.0,
) -> np.ndarray:
    """
    Rolling hills with a few sharp peaks. Deterministic for a given seed;
    good for demos and tests without a GeoTIFF.
    """
    rng = np.random.default_rng(seed)
    yy, xx = np.meshgrid(np.linspace(0, 4 * np.pi, H), np.linspace(0, 4 * np.pi, W), indexing="ij")

    base = 0.4 * relief * (1.0 + np.sin(0.5 * xx) * np.cos(0.35 * yy))
    long_waves = 0.2 * relief * (1.0 + np.sin(0.12 * xx + 0.3) * np.cos(0.1 * yy - 0.8))
    height = base + long_waves + rng.normal(0.0, noise, (H, W))

    rr, cc = np.ogrid[:H, :W]
    for _ in range(n_peaks):
        r0 = rng.integers(0, H)
        c0 = rng.integers(0, W)
        dist = np.hypot(rr - r0, cc - c0)
        sigma = rng.uniform(0.04, 0.1) * max(H, W)
        height = height + relief * np.exp(-(dist ** 2) / (2 * sigma ** 2))

    return np.clip(height, 0.0, None).astype(np.float32)
# endregion


# region Remote Probe
def _check_remote(url: str, timeout: float = 5.0) -> None:
    import requests

    try:
        r = requests.head(url, timeout=timeout, allow_redirects=True)
    except requests.RequestException as e:
        raise HeightfieldUnavailable(f"Heightfield check failed for {url}: {e}") from e
    if r.status_code != 200:
        raise HeightfieldUnavailable(f"Heightfield {url} not reachable (HTTP {r.status_code})")
# endregion


# region Raster Loader
def read_heightfield(
    source: str,
    out_shape: Optional[Tuple[int, int]] = None,
    window=None,
) -> Heightfield:
    """
    Read band 1 of a GeoTIFF (local path or COG URL) as a Heightfield.

    Args:
      source:    file path or http(s) URL
      out_shape: (H, W) to resample to with bilinear filtering; native if None
      window:    rasterio.windows.Window restricting the read
    """
    import rasterio
    from rasterio.enums import Resampling
    from rasterio.errors import RasterioIOError
    from rasterio.windows import transform as window_transform

    if source.startswith(("http://", "https://")):
        _check_remote(source)

    try:
        ds = rasterio.open(source)
    except RasterioIOError as e:
        raise HeightfieldUnavailable(f"Cannot open heightfield {source}: {e}") from e

    with ds:
        if window is not None:
            H_src, W_src = int(window.height), int(window.width)
            tf = window_transform(window, ds.transform)
        else:
            H_src, W_src = ds.height, ds.width
            tf = ds.transform
        if H_src < 1 or W_src < 1:
            raise ValueError(f"Selected window is empty (H={H_src}, W={W_src})")

        H_out, W_out = out_shape if out_shape is not None else (H_src, W_src)
        arr = ds.read(
            1,
            window=window,
            out_shape=(int(H_out), int(W_out)),
            resampling=Resampling.bilinear,
        ).astype(np.float64)

        nodata = ds.nodata
        if nodata is not None:
            valid = ~np.isclose(arr, nodata)
        else:
            valid = np.ones_like(arr, dtype=bool)
        valid &= np.isfinite(arr)

        # pixel size in native units, scaled by the resampling factor
        yres = abs(tf.e) * (H_src / float(H_out))
        if ds.crs and getattr(ds.crs, "is_geographic", False):
            # degrees -> meters (approx)
            cell_size = float(yres * 111_320.0)
        else:
            cell_size = float(yres)

    heights = np.where(valid, arr, 0.0).astype(np.float32)
    LOGGER.info("Loaded heightfield %s: %dx%d, cell_size=%.3f, invalid=%d",
                source, W_out, H_out, cell_size, int((~valid).sum()))
    return Heightfield(heights=heights, valid=valid, cell_size=cell_size if cell_size > 0 else 1.0)
# endregion


# region Max-pool Downsampling
def max_pool_heights(heights: np.ndarray, samples_per_side: int) -> np.ndarray:
    """
    Downsample to (samples_per_side, samples_per_side) keeping the highest
    sample of each block, so a coarse cell is never lower than the terrain
    it covers. Blocks share their boundary row/column with the next block.
    """
    arr = np.asarray(heights, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"heights must be 2-D, got shape {arr.shape}")
    n = int(samples_per_side)
    if n < 1:
        raise ValueError("samples_per_side must be >= 1")
    H, W = arr.shape
    if n > min(H, W):
        raise ValueError(f"Cannot pool {H}x{W} heights into {n}x{n} samples")

    out = np.empty((n, n), dtype=np.float32)
    r_edges = np.linspace(0, H - 1, n + 1).round().astype(int)
    c_edges = np.linspace(0, W - 1, n + 1).round().astype(int)
    for i in range(n):
        r0, r1 = r_edges[i], r_edges[i + 1]
        for j in range(n):
            c0, c1 = c_edges[j], c_edges[j + 1]
            out[i, j] = np.nanmax(arr[r0:r1 + 1, c0:c1 + 1])
    return out


def pool_heightfield(field: Heightfield, samples_per_side: int) -> Heightfield:
    """
    Max-pool a Heightfield. A coarse cell is valid if any sample under it
    is, and its height is the highest valid sample.
    """
    n = int(samples_per_side)
    heights = max_pool_heights(np.where(field.valid, field.heights, -np.inf), n)
    valid = max_pool_heights(field.valid.astype(np.float32), n) > 0.0
    H, W = field.shape
    cell_size = field.cell_size * max(H, W) / float(n)
    return Heightfield(
        heights=np.where(valid, heights, 0.0).astype(np.float32),
        valid=valid,
        cell_size=cell_size,
    )
# endregion
