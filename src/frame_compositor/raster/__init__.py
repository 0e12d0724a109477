"""
Raster Module
=============

Loading and decoding of image references.

Components:
    - RasterLoader: Async loader for data URIs, URLs and files
    - SourceImage: Decoded read-only BGRA bitmap
    - FetchError, DecodeError, TaintedSourceError: Failure kinds
"""

from frame_compositor.raster.errors import (
    DecodeError,
    FetchError,
    RasterLoadError,
    TaintedSourceError,
)
from frame_compositor.raster.source import SourceImage
from frame_compositor.raster.loader import RasterLoader, file_to_data_uri


__all__ = [
    "RasterLoader",
    "SourceImage",
    "file_to_data_uri",
    "RasterLoadError",
    "FetchError",
    "DecodeError",
    "TaintedSourceError",
]
