"""
Raster Load Errors
==================

Failure kinds reported by the raster loader.

    RasterLoadError
        FetchError          asset could not be retrieved
        DecodeError         payload is not a decodable raster
        TaintedSourceError  asset would make the surface non-exportable
"""


class RasterLoadError(Exception):
    """Base class for raster loader failures."""

    def __init__(self, ref: str, message: str) -> None:
        self.ref = ref
        super().__init__(f"{message} ({_short_ref(ref)})")


class FetchError(RasterLoadError):
    """Raised when an asset reference cannot be retrieved."""
    pass


class DecodeError(RasterLoadError):
    """Raised when a payload is not a valid raster image."""
    pass


class TaintedSourceError(RasterLoadError):
    """Raised when a remote asset does not allow cross-origin use."""
    pass


def _short_ref(ref: str, limit: int = 80) -> str:
    """Keep data URIs out of log lines."""
    if len(ref) <= limit:
        return ref
    return ref[: limit - 3] + "..."
