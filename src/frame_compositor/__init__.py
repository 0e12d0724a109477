"""
Frame Compositor
================

Overlay decorative frames on personal photos and export the result.

Components:
    - raster: Async loading and decoding of data URIs, URLs and files
    - layout: Canvas sizing and frame placement policy
    - compositor: Drawing surface, compositor and selection session
    - catalogue: Frame variant catalogue
    - export: Encoding and saving of finished surfaces

Example:
    from frame_compositor import Compositor, RasterLoader

    compositor = Compositor(RasterLoader())
    surface = await compositor.composite(photo_uri, variant)
    png_bytes = surface.encode("png")
"""

__version__ = "0.1.0"

from frame_compositor.models import FrameVariant, LayoutDecision, LayoutMode
from frame_compositor.raster import RasterLoader, SourceImage
from frame_compositor.layout import LayoutPolicy, decide
from frame_compositor.compositor import CompositeSurface, Compositor, CompositorSession
from frame_compositor.catalogue import FrameCatalogue
from frame_compositor.export import ExportSink

__all__ = [
    "__version__",
    "CompositeSurface",
    "Compositor",
    "CompositorSession",
    "ExportSink",
    "FrameCatalogue",
    "FrameVariant",
    "LayoutDecision",
    "LayoutMode",
    "LayoutPolicy",
    "RasterLoader",
    "SourceImage",
    "decide",
]
