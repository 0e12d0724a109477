"""
Export Module
=============

Components:
    - ExportSink: Encodes surfaces to PNG/JPEG/WebP bytes, data URLs, files
"""

from frame_compositor.compositor.surface import ExportError
from frame_compositor.export.sink import ExportSink


__all__ = [
    "ExportError",
    "ExportSink",
]
