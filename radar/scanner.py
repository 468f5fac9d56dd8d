from __future__ import annotations

"""
Remote Directory Scanner.

The MRMS directory index is plain HTML; we treat it as free text and pull out
every filename matching the grid-file pattern. Filenames embed a fixed-width
zero-padded `YYYYMMDD-HHMMSS` token, so lexicographic order is chronological.

Usage:
    scanner = DirectoryScanner(base_url)
    ref = scanner.latest()   # RemoteFileRef(name=..., is_compressed=...)
"""

import logging
import re
from typing import List, Optional, Pattern, Union

import requests

from common.types import RemoteFileRef
from radar.errors import NoFilesFoundError, TransportError


log = logging.getLogger(__name__)

DEFAULT_PATTERN = r"MRMS_ReflectivityAtLowestAltitude_\d{8}-\d{6}\.grib2(?:\.gz)?"


class DirectoryScanner:
    def __init__(
        self,
        base_url: str,
        *,
        pattern: Union[str, Pattern[str]] = DEFAULT_PATTERN,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Params:
            base_url: directory index URL (trailing slash expected)
            pattern: filename regex; swap it to follow a different product/listing format
            timeout: seconds for the listing request (connect + read)
            session: optional requests.Session for connection reuse
        """
        self.base_url = base_url
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.timeout = float(timeout)
        self.headers = {"User-Agent": user_agent} if user_agent else {}
        self.session = session or requests.Session()

    # ----------------------------
    # Public API
    # ----------------------------
    def fetch_listing(self) -> str:
        try:
            r = self.session.get(self.base_url, timeout=self.timeout, headers=self.headers)
            r.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"directory listing failed: {e}") from e
        return r.text

    def parse_listing(self, text: str) -> List[RemoteFileRef]:
        """All distinct matching filenames, newest first."""
        names = {m.group(0) for m in self.pattern.finditer(text or "")}
        return [RemoteFileRef.from_name(n) for n in sorted(names, reverse=True)]

    def list_files(self) -> List[RemoteFileRef]:
        return self.parse_listing(self.fetch_listing())

    def latest(self) -> RemoteFileRef:
        refs = self.list_files()
        if not refs:
            raise NoFilesFoundError(f"no files matching {self.pattern.pattern!r} at {self.base_url}")
        ref = refs[0]
        log.info("Found latest file: %s (compressed: %s)", ref.name, ref.is_compressed)
        return ref
