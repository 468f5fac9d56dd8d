"""
Unit tests for the remote directory scanner and fetcher
"""

import gzip
import os
import sys
from unittest.mock import Mock

import pytest
import requests

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.types import RemoteFileRef
from radar.errors import DecompressionError, NoFilesFoundError, TransportError
from radar.fetcher import Fetcher
from radar.scanner import DirectoryScanner

BASE = "https://mrms.example.test/data/2D/ReflectivityAtLowestAltitude/"

LISTING = """<html><body><pre>
<a href="MRMS_ReflectivityAtLowestAltitude_20240101-000000.grib2">MRMS_ReflectivityAtLowestAltitude_20240101-000000.grib2</a>   01-Jan-2024 00:01  1.2M
<a href="MRMS_ReflectivityAtLowestAltitude_20240101-000200.grib2.gz">MRMS_ReflectivityAtLowestAltitude_20240101-000200.grib2.gz</a>   01-Jan-2024 00:03  400K
<a href="latest.grib2.gz">latest.grib2.gz</a>
</pre></body></html>"""


def _response(text="", content=b"", status=200):
    r = Mock()
    r.text = text
    r.content = content
    r.status_code = status
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        r.raise_for_status.return_value = None
    return r


def _session(response=None, exc=None):
    s = Mock(spec=requests.Session)
    if exc is not None:
        s.get.side_effect = exc
    else:
        s.get.return_value = response
    return s


class TestDirectoryScanner:
    def test_latest_picks_lexicographically_last(self):
        scanner = DirectoryScanner(BASE, session=_session(_response(LISTING)))
        ref = scanner.latest()
        assert ref.name == "MRMS_ReflectivityAtLowestAltitude_20240101-000200.grib2.gz"
        assert ref.is_compressed is True
        assert ref.timestamp == "20240101-000200"

    def test_uncompressed_when_newest_has_no_gz(self):
        text = (
            "MRMS_ReflectivityAtLowestAltitude_20240101-000000.grib2.gz "
            "MRMS_ReflectivityAtLowestAltitude_20240101-000400.grib2"
        )
        ref = DirectoryScanner(BASE, session=_session(_response(text))).latest()
        assert ref.name.endswith("000400.grib2")
        assert ref.is_compressed is False

    def test_listing_is_deduplicated_and_sorted_newest_first(self):
        refs = DirectoryScanner(BASE, session=_session(_response(LISTING))).list_files()
        assert [r.timestamp for r in refs] == ["20240101-000200", "20240101-000000"]

    def test_no_matching_files_raises(self):
        scanner = DirectoryScanner(BASE, session=_session(_response("<html>nothing here</html>")))
        with pytest.raises(NoFilesFoundError):
            scanner.latest()

    def test_timeout_raises_transport_error(self):
        scanner = DirectoryScanner(BASE, timeout=10, session=_session(exc=requests.Timeout("slow")))
        with pytest.raises(TransportError):
            scanner.latest()

    def test_http_error_raises_transport_error(self):
        scanner = DirectoryScanner(BASE, session=_session(_response(status=503)))
        with pytest.raises(TransportError):
            scanner.latest()

    def test_listing_request_uses_configured_timeout(self):
        session = _session(_response(LISTING))
        DirectoryScanner(BASE, timeout=7.5, session=session).latest()
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 7.5

    def test_pattern_is_swappable(self):
        text = "OTHER_20240101-000000.bin OTHER_20240102-000000.bin.gz"
        scanner = DirectoryScanner(BASE, pattern=r"OTHER_\d{8}-\d{6}\.bin(?:\.gz)?", session=_session(_response(text)))
        ref = scanner.latest()
        assert ref.name == "OTHER_20240102-000000.bin.gz"
        assert ref.is_compressed


class TestFetcher:
    REF_GZ = RemoteFileRef.from_name("MRMS_ReflectivityAtLowestAltitude_20240101-000200.grib2.gz")
    REF_RAW = RemoteFileRef.from_name("MRMS_ReflectivityAtLowestAltitude_20240101-000000.grib2")

    def test_decompresses_gzip_payload(self):
        payload = b"GRIB" + b"\x00" * 64
        session = _session(_response(content=gzip.compress(payload)))
        fetcher = Fetcher(BASE, session=session)
        assert fetcher.fetch(self.REF_GZ) == payload
        args, kwargs = session.get.call_args
        assert args[0] == BASE + self.REF_GZ.name
        assert kwargs["timeout"] == 30.0

    def test_uncompressed_payload_passthrough(self):
        payload = b"GRIB raw bytes"
        fetcher = Fetcher(BASE, session=_session(_response(content=payload)))
        assert fetcher.fetch(self.REF_RAW) == payload

    def test_corrupt_gzip_raises(self):
        fetcher = Fetcher(BASE, session=_session(_response(content=b"definitely not gzip")))
        with pytest.raises(DecompressionError):
            fetcher.fetch(self.REF_GZ)

    def test_truncated_gzip_raises(self):
        blob = gzip.compress(b"GRIB" * 1000)
        fetcher = Fetcher(BASE, session=_session(_response(content=blob[: len(blob) // 2])))
        with pytest.raises(DecompressionError):
            fetcher.fetch(self.REF_GZ)

    def test_connection_error_raises_transport_error(self):
        fetcher = Fetcher(BASE, session=_session(exc=requests.ConnectionError("refused")))
        with pytest.raises(TransportError):
            fetcher.fetch(self.REF_GZ)
