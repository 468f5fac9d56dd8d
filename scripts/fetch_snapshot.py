#!/usr/bin/env python3
"""
Run the radar pipeline once, outside the HTTP server, and write the snapshot as JSON.

Useful for checking the MRMS feed and the decoder against a real file.

Examples:
  python scripts/fetch_snapshot.py --out runtime/latest.json
  python scripts/fetch_snapshot.py --list                 # newest remote files, no download
  python scripts/fetch_snapshot.py --live-only            # exit 1 instead of generating data
  python scripts/fetch_snapshot.py --generated --seed 7   # synthetic snapshot only
"""
from __future__ import annotations

import argparse
import json
import os
import random
import sys
from pathlib import Path
from typing import Optional

# Allow running as a plain script from the repo root
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.logging_setup import setup_logging
from common.types import Snapshot
from radar.config import load_config
from radar.errors import RadarSourceError
from radar.service import RadarService


def write_snapshot(snapshot: Snapshot, out: Optional[str]) -> None:
    payload = json.dumps(snapshot.to_dict(), separators=(",", ":"))
    if not out:
        print(payload)
        return
    path = Path(out)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload)
    print(f"[ok] wrote {snapshot.count} samples ({snapshot.source.value}) to {path}")


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=None, help="YAML config (default: config/params.yaml)")
    ap.add_argument("--out", default="", help="Output JSON path (default: stdout)")
    ap.add_argument("--list", action="store_true", help="Print matching remote files, newest first, and exit")
    ap.add_argument("--limit", type=int, default=10, help="Max files printed by --list")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--live-only", action="store_true", help="Fail instead of falling back to generated data")
    mode.add_argument("--generated", action="store_true", help="Skip MRMS and emit a synthetic snapshot")
    ap.add_argument("--seed", type=int, default=None, help="Seed for the synthetic generator")
    args = ap.parse_args(argv)

    cfg = load_config(args.config)
    setup_logging(cfg.log_level)
    svc = RadarService.from_config(cfg)
    if args.seed is not None:
        svc.rng = random.Random(args.seed)

    if args.list:
        for ref in svc.scanner.list_files()[: args.limit]:
            print(f"{ref.timestamp}  {'gz ' if ref.is_compressed else 'raw'}  {ref.name}")
        return 0

    if args.generated:
        write_snapshot(svc.generate(), args.out)
        return 0

    if args.live_only:
        try:
            snapshot = svc.fetch_live()
        except RadarSourceError as e:
            print(f"[error] {type(e).__name__}: {e}", file=sys.stderr)
            return 1
        write_snapshot(snapshot, args.out)
        return 0

    write_snapshot(svc.latest(), args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
