"""
Radar API

- GET /api/radar/latest  -> {timestamp, data:[{lat,lon,value}], count, source}
- GET /api/health        -> {status, timestamp, cached, cacheAge}
- GET /                  -> service descriptor
"""
from __future__ import annotations

import logging
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.logging_setup import setup_logging
from radar.config import RadarConfig, load_config
from radar.service import RadarService


log = logging.getLogger(__name__)


def create_app(
    service: Optional[RadarService] = None,
    cfg: Optional[RadarConfig] = None,
    allowed_origins: Optional[List[str]] = None,
) -> FastAPI:
    """Build the app around an explicit service (and its cache) instead of module globals."""
    cfg = cfg or load_config()
    service = service or RadarService.from_config(cfg)
    origins = list(allowed_origins if allowed_origins is not None else cfg.allowed_origins)

    app = FastAPI(title="Weather Radar API", version="1.0.0")
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root():
        return {
            "service": "Weather Radar API",
            "endpoints": {"health": "/api/health", "radar": "/api/radar/latest"},
        }

    @app.get("/api/health")
    def health():
        return app.state.service.health()

    @app.get("/api/radar/latest")
    def radar_latest():
        try:
            snapshot = app.state.service.latest()
            return snapshot.to_dict()
        except Exception as e:
            # acquisition failures already fell back inside the service; this is cache/serialization
            log.exception("Fatal error serving radar data")
            return JSONResponse(
                {"error": "Failed to process radar data", "details": str(e)},
                status_code=500,
            )

    return app


def run(cfg: Optional[RadarConfig] = None) -> None:
    cfg = cfg or load_config()
    setup_logging(cfg.log_level)
    app = create_app(cfg=cfg)
    log.info("Server running on port %d", cfg.port)
    log.info("Radar endpoint: http://localhost:%d/api/radar/latest", cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port)


# -------- local dev entrypoint --------
if __name__ == "__main__":
    run()
