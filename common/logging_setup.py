from __future__ import annotations

import json
import logging
import os
import sys
import time
from typing import Dict, Optional


# chatty per-request / per-message loggers from the HTTP and GRIB stacks
NOISY_LOGGERS = ("urllib3", "cfgrib", "httpx")


class JsonFormatter(logging.Formatter):
    """
    Renders each record as a single-line JSON object for the service's stdout:

        {"t": <epoch ms>, "lvl": "WARNING", "name": "radar.service",
         "msg": "MRMS fetch failed ...", "extra": {"file": "...", "elapsed_ms": 812.4}}

    Pipeline context goes in via `log.info(msg, extra={"extra": {...}})`.
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict = {
            "t": int(record.created * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        context = getattr(record, "extra", None)
        if isinstance(context, dict):
            payload["extra"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # numpy scalars and paths in `extra` fall back to str()
        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = logging.getLevelName(name)
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(level: Optional[str] = None) -> None:
    """
    Send all radar service logs to stdout as JSON.

    The handler is installed once; a later call with an explicit `level`
    (e.g. from the loaded config) only adjusts the root level. Without an
    argument the level comes from LOG_LEVEL, defaulting to INFO.
    """
    root = logging.getLogger()
    if getattr(root, "_radar_configured", False):
        if level:
            root.setLevel(_resolve_level(level))
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    root._radar_configured = True  # type: ignore[attr-defined]


def elapsed_ms(t0: float) -> float:
    """Milliseconds since a `time.perf_counter()` reading."""
    return round((time.perf_counter() - t0) * 1e3, 1)
