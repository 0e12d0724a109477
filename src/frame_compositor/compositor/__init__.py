"""
Compositor Module
=================

Components:
    - Compositor: Draws photo + frame into a surface
    - CompositeSurface: BGRA drawing target with encode()
    - CompositorSession: Current selection with stale-result guard
"""

from frame_compositor.compositor.surface import CompositeSurface, ExportError
from frame_compositor.compositor.compositor import Compositor
from frame_compositor.compositor.session import CompositeRequest, CompositorSession


__all__ = [
    "CompositeSurface",
    "Compositor",
    "CompositeRequest",
    "CompositorSession",
    "ExportError",
]
