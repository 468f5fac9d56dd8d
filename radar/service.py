from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, Optional, Tuple

from common.logging_setup import elapsed_ms
from common.types import CONUS, BBox, Snapshot, SnapshotSource
from common.utils import iso_now_ms, now_ms, stamp_now
from radar.cache import SnapshotCache
from radar.config import RadarConfig
from radar.decoder import Decoder, GribDecoder
from radar.errors import RadarSourceError
from radar.fallback import generate_fallback
from radar.fetcher import Fetcher
from radar.projector import DEFAULT_STRIDE, VALID_RANGE, project_grid
from radar.scanner import DirectoryScanner


log = logging.getLogger(__name__)


class RadarService:
    """
    Per-request orchestration:

      cache valid  -> cached snapshot, no network
      stale/absent -> scan -> fetch -> decode -> project  (source=LIVE)
                      any error on that path -> synthetic (source=GENERATED)
                      either result overwrites the cache slot

    Only a failure writing the cache slot reaches the caller.
    """

    def __init__(
        self,
        scanner: DirectoryScanner,
        fetcher: Fetcher,
        decoder: Decoder,
        cache: SnapshotCache,
        *,
        bbox: BBox = CONUS,
        stride: int = DEFAULT_STRIDE,
        valid_range: Tuple[float, float] = VALID_RANGE,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.scanner = scanner
        self.fetcher = fetcher
        self.decoder = decoder
        self.cache = cache
        self.bbox = bbox
        self.stride = int(stride)
        self.valid_range = valid_range
        self.rng = rng or random.Random()
        self.clock = clock

    @classmethod
    def from_config(cls, cfg: RadarConfig, cache: Optional[SnapshotCache] = None) -> "RadarService":
        return cls(
            scanner=DirectoryScanner(
                cfg.base_url,
                pattern=cfg.file_pattern,
                timeout=cfg.listing_timeout_s,
                user_agent=cfg.user_agent,
            ),
            fetcher=Fetcher(cfg.base_url, timeout=cfg.download_timeout_s, user_agent=cfg.user_agent),
            decoder=GribDecoder(),
            cache=cache or SnapshotCache(cfg.ttl_ms),
            bbox=cfg.bbox,
            stride=cfg.stride,
            valid_range=cfg.valid_range,
        )

    # -------- public API --------

    def latest(self) -> Snapshot:
        now = self.clock()
        cached = self.cache.get(now)
        if cached is not None:
            return cached

        try:
            snapshot = self.fetch_live()
        except RadarSourceError as e:
            log.warning("MRMS fetch failed (%s): %s; falling back to generated data", type(e).__name__, e)
            snapshot = self.generate()
        except Exception as e:
            log.error("Live pipeline error (%s): %s; falling back to generated data", type(e).__name__, e, exc_info=True)
            snapshot = self.generate()

        self.cache.put(snapshot, now)
        return snapshot

    def fetch_live(self) -> Snapshot:
        t0 = time.perf_counter()
        log.info("Attempting to fetch from MRMS")
        ref = self.scanner.latest()
        buffer = self.fetcher.fetch(ref)
        log.info("Processing %d bytes", len(buffer))
        grid = self.decoder.decode(buffer)
        samples = project_grid(grid, self.bbox, self.stride, self.valid_range)
        log.info(
            "Processed %d points from MRMS",
            len(samples),
            extra={"extra": {"file": ref.name, "elapsed_ms": elapsed_ms(t0)}},
        )
        return Snapshot.build(ref.timestamp, samples, SnapshotSource.LIVE)

    def generate(self) -> Snapshot:
        samples = generate_fallback(self.rng, self.bbox)
        log.info("Using fallback data generation (%d points)", len(samples))
        return Snapshot.build(stamp_now(), samples, SnapshotSource.GENERATED)

    def health(self) -> Dict:
        return {
            "status": "ok",
            "timestamp": iso_now_ms(),
            "cached": self.cache.is_populated,
            "cacheAge": self.cache.age_seconds(self.clock()),
        }
