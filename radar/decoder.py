from __future__ import annotations

"""
Grid Decoder: decompressed GRIB2 buffer -> Grid.

Precondition: the buffer holds at least one GRIB message and the first data
variable is the reflectivity field. MRMS RALA files carry exactly one.
Anything else is reported as DecodeError; there is no partial recovery.

Orientation: MRMS stores rows north -> south. Rows are flipped here when
latitude decreases with row index, so the returned Grid has row 0 at the
southern edge (what radar.projector assumes).
"""

import logging
import os
import tempfile
from typing import Optional, Protocol, Tuple

import numpy as np
import xarray as xr

from common.types import Grid
from radar.errors import DecodeError


log = logging.getLogger(__name__)

GRIB_MAGIC = b"GRIB"
# MRMS CONUS 0.01 deg grid, used when the field carries no shape
DEFAULT_COLUMNS = 7000
DEFAULT_ROWS = 3500
# MRMS sentinels: -999 no coverage, -99 missing
SENTINEL_MAX = -99.0


class Decoder(Protocol):
    def decode(self, buffer: bytes) -> Grid: ...


def _detect_missing_value(variable) -> Optional[float]:
    for key in ("missing_value", "_FillValue", "GRIB_missingValue"):
        if key in variable.attrs:
            try:
                return float(variable.attrs[key])
            except (TypeError, ValueError):
                continue
    return None


def _orient_south_up(latitudes: np.ndarray, values: np.ndarray) -> Tuple[np.ndarray, bool]:
    """Flip rows if latitude decreases with row index."""
    if values.ndim != 2 or latitudes.size < 2:
        return values, False
    if latitudes.ndim == 2:
        first, last = float(latitudes[0, 0]), float(latitudes[-1, 0])
    else:
        first, last = float(latitudes[0]), float(latitudes[-1])
    if first > last:
        return np.flipud(values), True
    return values, False


def _normalise(values: np.ndarray, missing: Optional[float]) -> np.ndarray:
    values = values.astype(np.float64, copy=False)
    if missing is not None:
        values = np.where(values == missing, np.nan, values)
    return np.where(values <= SENTINEL_MAX, np.nan, values)


def grid_from_field(values: np.ndarray, latitudes: Optional[np.ndarray] = None, missing: Optional[float] = None) -> Grid:
    """Shape a decoded field (2-D, or flat without shape metadata) into a Grid."""
    values = np.asarray(values)
    if values.ndim == 3 and values.shape[0] == 1:
        values = values[0]
    if values.ndim == 2:
        if latitudes is not None:
            values, flipped = _orient_south_up(np.asarray(latitudes), values)
            if flipped:
                log.debug("Flipped grid rows to south-up order")
        rows, cols = values.shape
    elif values.ndim == 1:
        rows, cols = DEFAULT_ROWS, DEFAULT_COLUMNS
    else:
        raise DecodeError(f"unexpected field rank {values.ndim}")
    return Grid(columns=int(cols), rows=int(rows), values=_normalise(values, missing).ravel(), no_data=missing)


class GribDecoder:
    """GRIB2 decoding via xarray's cfgrib engine (needs a file path, so the buffer is spooled to disk)."""

    def __init__(self, tmp_dir: Optional[str] = None):
        self.tmp_dir = tmp_dir

    def decode(self, buffer: bytes) -> Grid:
        if not buffer:
            raise DecodeError("empty buffer")
        if not buffer.startswith(GRIB_MAGIC):
            raise DecodeError("buffer is not a GRIB message (bad magic)")

        fd, path = tempfile.mkstemp(suffix=".grib2", dir=self.tmp_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(buffer)
            return self._decode_file(path)
        finally:
            try:
                os.remove(path)
            except OSError:
                log.warning("Could not remove temp GRIB file %s", path)

    def _decode_file(self, path: str) -> Grid:
        try:
            ds = xr.open_dataset(path, engine="cfgrib", backend_kwargs={"indexpath": ""})
        except Exception as e:
            raise DecodeError(f"GRIB2 open failed: {e}") from e
        try:
            names = list(ds.data_vars)
            if not names:
                raise DecodeError("no data messages found in GRIB2 file")
            variable = ds[names[0]]
            try:
                values = variable.values
                latitudes = ds["latitude"].values if "latitude" in ds.coords else None
            except Exception as e:
                raise DecodeError(f"GRIB2 read failed: {e}") from e
            grid = grid_from_field(values, latitudes, _detect_missing_value(variable))
        finally:
            ds.close()
        log.info("Grid dimensions: %dx%d, data points: %d", grid.columns, grid.rows, grid.values.size)
        return grid
