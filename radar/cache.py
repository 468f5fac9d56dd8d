from __future__ import annotations

from typing import Optional

from common.types import Snapshot


class SnapshotCache:
    """
    Single-slot in-memory cache: the latest Snapshot and the time it was produced.

    No lock: writes replace the slot wholesale (last write wins), so concurrent
    refreshes during a stale window only duplicate work.
    """

    def __init__(self, ttl_ms: int = 120_000):
        if ttl_ms < 0:
            raise ValueError("ttl_ms must be >= 0")
        self.ttl_ms = int(ttl_ms)
        self._snapshot: Optional[Snapshot] = None
        self._fetched_at_ms: int = 0

    # -------- public API --------

    def get(self, now_ms: int) -> Optional[Snapshot]:
        """Return the cached snapshot if still within TTL, else None."""
        if self._snapshot is None:
            return None
        if now_ms - self._fetched_at_ms < self.ttl_ms:
            return self._snapshot
        return None

    def put(self, snapshot: Snapshot, now_ms: int) -> None:
        self._snapshot = snapshot
        self._fetched_at_ms = int(now_ms)

    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self._snapshot

    @property
    def is_populated(self) -> bool:
        return self._snapshot is not None

    @property
    def fetched_at_ms(self) -> int:
        return self._fetched_at_ms

    def age_seconds(self, now_ms: int) -> Optional[int]:
        if self._snapshot is None:
            return None
        return int((now_ms - self._fetched_at_ms) // 1000)
