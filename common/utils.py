from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional


STAMP_FORMAT = "%Y%m%d-%H%M%S"


def now_ms() -> int:
    """Wall-clock time in integer milliseconds (the cache's clock)."""
    return int(time.time() * 1000)


def iso_now_ms(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def stamp_now(now: Optional[datetime] = None) -> str:
    """UTC time as the compact `YYYYMMDD-HHMMSS` token used in MRMS filenames."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime(STAMP_FORMAT)


def clamp(v: float, lo: float, hi: float) -> float:
    return float(min(hi, max(lo, v)))


def round_coord(x: float) -> float:
    return round(float(x), 4)


def round_value(x: float) -> float:
    return round(float(x), 1)
