from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from common.types import BBox


DEFAULT_CONFIG_PATH = "config/params.yaml"

_DEFAULTS: Dict = {
    "source": {
        "base_url": "https://mrms.ncep.noaa.gov/data/2D/ReflectivityAtLowestAltitude/",
        "file_pattern": r"MRMS_ReflectivityAtLowestAltitude_\d{8}-\d{6}\.grib2(?:\.gz)?",
        "listing_timeout_s": 10,
        "download_timeout_s": 30,
        "user_agent": "radar-snapshot/1.0",
    },
    "cache": {"ttl_ms": 120_000},
    "projection": {
        "stride": 25,
        "valid_min_dbz": 5.0,
        "valid_max_dbz": 80.0,
        "bbox": {"min_lat": 20.0, "max_lat": 55.0, "min_lon": -130.0, "max_lon": -60.0},
    },
    "server": {
        "host": "0.0.0.0",
        "port": 3001,
        "allowed_origins": [
            "http://localhost:3000",
            "https://weather-radar-app-frontend.onrender.com",
            "https://weather-radar-app-backend.onrender.com",
        ],
    },
    "logging": {"level": "INFO"},
}


@dataclass
class RadarConfig:
    """Runtime configuration for the radar snapshot service."""
    base_url: str = _DEFAULTS["source"]["base_url"]
    file_pattern: str = _DEFAULTS["source"]["file_pattern"]
    listing_timeout_s: float = 10.0
    download_timeout_s: float = 30.0
    user_agent: str = _DEFAULTS["source"]["user_agent"]

    ttl_ms: int = 120_000

    stride: int = 25
    valid_range: Tuple[float, float] = (5.0, 80.0)
    bbox: BBox = field(default_factory=BBox)

    host: str = "0.0.0.0"
    port: int = 3001
    allowed_origins: List[str] = field(default_factory=lambda: list(_DEFAULTS["server"]["allowed_origins"]))

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.base_url.endswith("/"):
            self.base_url += "/"
        if self.stride < 1:
            raise ValueError("stride must be >= 1")
        if self.ttl_ms < 0:
            raise ValueError("ttl_ms must be >= 0")
        lo, hi = self.valid_range
        if lo >= hi:
            raise ValueError("valid_range must be (lo, hi) with lo < hi")
        if "*" in self.allowed_origins:
            raise ValueError("allowed_origins must be an explicit allow-list")


def _merge(base: Dict, override: Dict) -> Dict:
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: str) -> Dict:
    if not Path(path).exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> RadarConfig:
    """
    Build a RadarConfig from (lowest to highest precedence):
      - built-in defaults
      - YAML file at `path` (or env RADAR_CONFIG, or config/params.yaml); a missing file is fine
      - env overrides: PORT, HOST, RADAR_CACHE_TTL_MS, RADAR_ALLOWED_ORIGINS (comma list), LOG_LEVEL
    """
    env = os.environ if env is None else env
    path = path or env.get("RADAR_CONFIG") or DEFAULT_CONFIG_PATH
    P = _merge(_DEFAULTS, _load_yaml(path))

    src, proj, srv = P["source"], P["projection"], P["server"]
    cfg = {
        "base_url": str(src["base_url"]),
        "file_pattern": str(src["file_pattern"]),
        "listing_timeout_s": float(src["listing_timeout_s"]),
        "download_timeout_s": float(src["download_timeout_s"]),
        "user_agent": str(src["user_agent"]),
        "ttl_ms": int(P["cache"]["ttl_ms"]),
        "stride": int(proj["stride"]),
        "valid_range": (float(proj["valid_min_dbz"]), float(proj["valid_max_dbz"])),
        "bbox": BBox(**{k: float(v) for k, v in proj["bbox"].items()}),
        "host": str(srv["host"]),
        "port": int(srv["port"]),
        "allowed_origins": [str(o) for o in srv["allowed_origins"]],
        "log_level": str(P["logging"]["level"]),
    }

    if env.get("PORT"):
        cfg["port"] = int(env["PORT"])
    if env.get("HOST"):
        cfg["host"] = env["HOST"]
    if env.get("RADAR_CACHE_TTL_MS"):
        cfg["ttl_ms"] = int(env["RADAR_CACHE_TTL_MS"])
    if env.get("RADAR_ALLOWED_ORIGINS"):
        cfg["allowed_origins"] = [o.strip() for o in env["RADAR_ALLOWED_ORIGINS"].split(",") if o.strip()]
    if env.get("LOG_LEVEL"):
        cfg["log_level"] = env["LOG_LEVEL"]

    return RadarConfig(**cfg)
