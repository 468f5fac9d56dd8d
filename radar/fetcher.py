from __future__ import annotations

import gzip
import logging
import zlib
from typing import Optional

import requests

from common.types import RemoteFileRef
from radar.errors import DecompressionError, TransportError


log = logging.getLogger(__name__)


class Fetcher:
    """
    Downloads one grid file into memory and gunzips it when flagged compressed.
    No streaming decode: the full body is assembled before decompression.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = float(timeout)
        self.headers = {"User-Agent": user_agent} if user_agent else {}
        self.session = session or requests.Session()

    def download(self, ref: RemoteFileRef) -> bytes:
        url = f"{self.base_url}{ref.name}"
        try:
            r = self.session.get(url, timeout=self.timeout, headers=self.headers)
            r.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"download of {ref.name} failed: {e}") from e
        return r.content

    @staticmethod
    def decompress(payload: bytes) -> bytes:
        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as e:
            raise DecompressionError(f"gunzip failed: {e}") from e

    def fetch(self, ref: RemoteFileRef) -> bytes:
        raw = self.download(ref)
        log.info("Downloaded %s (%d bytes)", ref.name, len(raw))
        if not ref.is_compressed:
            return raw
        out = self.decompress(raw)
        log.info("Decompressed %s: %d -> %d bytes", ref.name, len(raw), len(out))
        return out
