from __future__ import annotations


class RadarSourceError(Exception):
    """Base for failures of the remote data source; the service falls back on any of these."""


class NoFilesFoundError(RadarSourceError):
    """Directory listing contained no filename matching the grid-file pattern."""


class TransportError(RadarSourceError):
    """Connection failure, timeout or non-2xx response on listing or download."""


class DecompressionError(RadarSourceError):
    """Corrupt or truncated gzip payload."""


class DecodeError(RadarSourceError):
    """Decoder rejected the buffer or produced no usable field."""
