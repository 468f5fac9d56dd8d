from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np


IsoTime = str

STAMP_RE = re.compile(r"\d{8}-\d{6}")
GZ_SUFFIX = ".gz"


@dataclass(frozen=True, slots=True)
class BBox:
    """Geographic bounding box in WGS84 degrees."""
    min_lat: float = 20.0
    max_lat: float = 55.0
    min_lon: float = -130.0
    max_lon: float = -60.0

    def __post_init__(self) -> None:
        if self.min_lat >= self.max_lat or self.min_lon >= self.max_lon:
            raise ValueError("bbox min must be < max")

    def contains(self, lat: float, lon: float) -> bool:
        return (self.min_lat <= lat <= self.max_lat) and (self.min_lon <= lon <= self.max_lon)


# MRMS CONUS grid extent
CONUS = BBox()


@dataclass(frozen=True, slots=True)
class RemoteFileRef:
    """
    One grid file in the remote directory.

    Attributes:
        name: bare filename, e.g. MRMS_ReflectivityAtLowestAltitude_20240101-000200.grib2.gz
        is_compressed: True iff `name` carries the gzip suffix.
    """
    name: str
    is_compressed: bool

    @classmethod
    def from_name(cls, name: str) -> "RemoteFileRef":
        return cls(name=name, is_compressed=name.endswith(GZ_SUFFIX))

    @property
    def timestamp(self) -> str:
        """Embedded `YYYYMMDD-HHMMSS` token."""
        m = STAMP_RE.search(self.name)
        if m is None:
            raise ValueError(f"no timestamp token in {self.name!r}")
        return m.group(0)


@dataclass(slots=True)
class Grid:
    """
    Decoded rectangular grid, row-major, row 0 = southernmost row.

    Attributes:
        columns, rows: declared dimensions (may exceed len(values) on short buffers).
        values: flat float array addressable by row * columns + column.
        no_data: missing-value marker reported by the decoder, if any.
    """
    columns: int
    rows: int
    values: np.ndarray = field(repr=False)
    no_data: Optional[float] = None

    def __post_init__(self) -> None:
        if self.columns <= 0 or self.rows <= 0:
            raise ValueError("grid dimensions must be > 0")
        self.values = np.asarray(self.values, dtype=np.float64).ravel()


@dataclass(frozen=True, slots=True)
class Sample:
    """One geolocated reflectivity sample (dBZ)."""
    latitude: float
    longitude: float
    value: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.latitude, "lon": self.longitude, "value": self.value}


class SnapshotSource(str, Enum):
    LIVE = "MRMS RALA (Live)"
    GENERATED = "Generated (MRMS unavailable)"


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    The unit held by the cache and returned to clients.
    `count` is derived from `samples` and cannot be set independently.
    """
    timestamp: str
    samples: Tuple[Sample, ...]
    source: SnapshotSource

    def __post_init__(self) -> None:
        if not isinstance(self.samples, tuple):
            object.__setattr__(self, "samples", tuple(self.samples))

    @classmethod
    def build(cls, timestamp: str, samples: Sequence[Sample], source: SnapshotSource) -> "Snapshot":
        return cls(timestamp=timestamp, samples=tuple(samples), source=source)

    @property
    def count(self) -> int:
        return len(self.samples)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "data": [s.to_dict() for s in self.samples],
            "count": self.count,
            "source": self.source.value,
        }
