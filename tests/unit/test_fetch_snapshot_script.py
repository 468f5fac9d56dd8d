"""
Unit tests for scripts/fetch_snapshot.py (one-shot pipeline CLI)
"""

import importlib.util
import json
import os
import sys
from unittest.mock import patch

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from radar.errors import TransportError
from radar.service import RadarService


def _load_script():
    path = os.path.join(project_root, "scripts", "fetch_snapshot.py")
    spec = importlib.util.spec_from_file_location("fetch_snapshot", path)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_generated_snapshot_written(tmp_path):
    mod = _load_script()
    out = tmp_path / "snap.json"
    assert mod.main(["--generated", "--seed", "1", "--out", str(out)]) == 0
    body = json.loads(out.read_text())
    assert body["count"] == 550 == len(body["data"])
    assert body["source"] == "Generated (MRMS unavailable)"


def test_live_only_exits_nonzero_on_source_error(tmp_path):
    mod = _load_script()
    with patch.object(RadarService, "fetch_live", side_effect=TransportError("offline")):
        assert mod.main(["--live-only", "--out", str(tmp_path / "x.json")]) == 1
    assert not (tmp_path / "x.json").exists()
