from __future__ import annotations

"""
Synthetic reflectivity used whenever the live MRMS path fails.

Shape is fixed (5 storms x 80 points + 150 background points = 550 samples);
values are random. Pass a seeded `random.Random` for reproducible output.
"""

import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from common.types import CONUS, BBox, Sample
from common.utils import clamp, round_coord, round_value


@dataclass(frozen=True)
class StormCenter:
    lat: float
    lon: float
    peak_dbz: float
    radius_deg: float


STORM_CENTERS: Tuple[StormCenter, ...] = (
    StormCenter(35.5, -97.5, 55.0, 2.5),   # Oklahoma City
    StormCenter(30.2, -81.6, 45.0, 2.0),   # Jacksonville
    StormCenter(41.8, -87.6, 40.0, 1.8),   # Chicago
    StormCenter(33.7, -84.4, 50.0, 2.2),   # Atlanta
    StormCenter(29.7, -95.3, 38.0, 1.5),   # Houston
)

POINTS_PER_STORM = 80
BACKGROUND_POINTS = 150
STORM_NOISE_DBZ = 7.5
STORM_RANGE = (5.0, 75.0)
BACKGROUND_RANGE = (5.0, 25.0)


def storm_points(
    storm: StormCenter, rng: random.Random, bbox: BBox = CONUS, n: int = POINTS_PER_STORM
) -> List[Sample]:
    out: List[Sample] = []
    for _ in range(n):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        distance = rng.random() * storm.radius_deg
        lat = storm.lat + distance * math.cos(angle)
        lon = storm.lon + distance * math.sin(angle)
        if not bbox.contains(lat, lon):
            # storms near the edge of a narrower configured bbox
            lat = clamp(lat, bbox.min_lat, bbox.max_lat)
            lon = clamp(lon, bbox.min_lon, bbox.max_lon)
        falloff = 1.0 - distance / storm.radius_deg
        noise = rng.uniform(-STORM_NOISE_DBZ, STORM_NOISE_DBZ)
        value = clamp(storm.peak_dbz * falloff + noise, *STORM_RANGE)
        out.append(Sample(latitude=round_coord(lat), longitude=round_coord(lon), value=round_value(value)))
    return out


def background_points(rng: random.Random, bbox: BBox = CONUS, n: int = BACKGROUND_POINTS) -> List[Sample]:
    lo, hi = BACKGROUND_RANGE
    return [
        Sample(
            latitude=round_coord(rng.uniform(bbox.min_lat, bbox.max_lat)),
            longitude=round_coord(rng.uniform(bbox.min_lon, bbox.max_lon)),
            value=round_value(rng.uniform(lo, hi)),
        )
        for _ in range(n)
    ]


def generate_fallback(
    rng: Optional[random.Random] = None,
    bbox: BBox = CONUS,
    storms: Sequence[StormCenter] = STORM_CENTERS,
) -> List[Sample]:
    """Storm clusters first (in `storms` order), then background scatter."""
    rng = rng or random.Random()
    samples: List[Sample] = []
    for storm in storms:
        samples.extend(storm_points(storm, rng, bbox))
    samples.extend(background_points(rng, bbox))
    return samples
