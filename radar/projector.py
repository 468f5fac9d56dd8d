from __future__ import annotations

from typing import List, Tuple

import numpy as np

from common.types import CONUS, BBox, Grid, Sample
from common.utils import round_coord, round_value


DEFAULT_STRIDE = 25
# dBZ, open interval: drops the noise floor and saturated cells
VALID_RANGE: Tuple[float, float] = (5.0, 80.0)


def project_grid(
    grid: Grid,
    bbox: BBox = CONUS,
    stride: int = DEFAULT_STRIDE,
    valid_range: Tuple[float, float] = VALID_RANGE,
) -> List[Sample]:
    """
    Subsample `grid` every `stride` rows/columns and map kept cells to (lat, lon, dBZ).

    - cell (row, col) -> lat = min_lat + row * lat_step, lon = min_lon + col * lon_step
    - cells whose flat index is past the end of `grid.values` are skipped
    - values must lie strictly inside `valid_range` (before and after rounding); others are dropped
    - output is row-major in visitation order; lat/lon rounded to 4 dp, value to 1 dp

    An empty list is a valid result.
    """
    if stride < 1:
        raise ValueError("stride must be >= 1")
    lo, hi = valid_range

    lat_step = (bbox.max_lat - bbox.min_lat) / grid.rows
    lon_step = (bbox.max_lon - bbox.min_lon) / grid.columns

    rows = np.arange(0, grid.rows, stride, dtype=np.int64)
    cols = np.arange(0, grid.columns, stride, dtype=np.int64)
    r = np.repeat(rows, cols.size)
    c = np.tile(cols, rows.size)
    idx = r * grid.columns + c

    in_bounds = idx < grid.values.size
    r, c, idx = r[in_bounds], c[in_bounds], idx[in_bounds]

    vals = grid.values[idx]
    with np.errstate(invalid="ignore"):
        keep = (vals > lo) & (vals < hi)
        rounded = np.round(vals, 1)
        keep &= (rounded > lo) & (rounded < hi)

    lats = bbox.min_lat + r[keep] * lat_step
    lons = bbox.min_lon + c[keep] * lon_step
    return [
        Sample(latitude=round_coord(la), longitude=round_coord(lo_), value=round_value(v))
        for la, lo_, v in zip(lats.tolist(), lons.tolist(), vals[keep].tolist())
    ]
