"""
Compositor
==========

Draws a photo and a frame variant into a fresh CompositeSurface.

Steps:
    1. Load the base photo (failures propagate to the caller)
    2. Ask the layout policy for the canvas size
    3. Allocate a cleared surface and draw the photo
       - CIRCULAR: photo covers the circle and is clipped to it
       - otherwise: photo stretched over the whole canvas
    4. Load the frame asset, place it with its native size, draw it

Failure Semantics:
    A base photo that cannot be loaded aborts the composite.
    A frame asset that cannot be loaded is logged and leaves the
    base-only surface; the error is recorded on the surface, not raised.

Example:
    compositor = Compositor(RasterLoader())
    surface = await compositor.composite(photo_uri, variant)
    png = surface.encode("png")
"""

import logging
from typing import Callable, Optional

from frame_compositor.compositor.surface import CompositeSurface
from frame_compositor.layout.policy import LayoutPolicy
from frame_compositor.models.variant import FrameVariant
from frame_compositor.raster.errors import RasterLoadError
from frame_compositor.raster.loader import RasterLoader


logger = logging.getLogger(__name__)


class Compositor:
    """
    Orchestrates raster loading, layout and drawing.

    Attributes:
        loader: Raster loader for photos and frame assets
        policy: Layout policy
    """

    def __init__(
        self,
        loader: RasterLoader,
        policy: Optional[LayoutPolicy] = None,
    ) -> None:
        self.loader = loader
        self.policy = policy or LayoutPolicy()

        self._composite_count: int = 0
        self._degraded_count: int = 0

    async def composite(
        self,
        source_ref: str,
        variant: Optional[FrameVariant] = None,
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> CompositeSurface:
        """
        Composite a photo with an optional frame.

        Args:
            source_ref: Photo reference (data URI, URL or path)
            variant: Frame to overlay, or None for the photo alone
            should_continue: Advisory cancellation check run after each
                load; when it returns False drawing stops early

        Returns:
            The drawn surface

        Raises:
            FetchError, DecodeError, TaintedSourceError: If the photo
                cannot be loaded
        """
        self._composite_count += 1

        base = await self.loader.load(source_ref)

        decision = self.policy.decide(variant, base.width, base.height)
        surface = CompositeSurface(decision.canvas_width, decision.canvas_height)
        surface.decision = decision
        surface.clear()
        surface.draw_image(base, decision.base_rect, clip=decision.clip)

        if variant is None:
            return surface

        if should_continue is not None and not should_continue():
            logger.debug(f"Composite superseded before loading frame '{variant.id}'")
            return surface

        try:
            frame = await self.loader.load(variant.asset_ref)
        except RasterLoadError as e:
            self._degraded_count += 1
            surface.frame_error = e
            logger.warning(
                f"Frame '{variant.id}' could not be loaded, "
                f"showing photo only: {type(e).__name__}: {e}"
            )
            return surface

        if should_continue is not None and not should_continue():
            logger.debug(f"Composite superseded before drawing frame '{variant.id}'")
            return surface

        decision = self.policy.decide(
            variant, base.width, base.height, frame.width, frame.height
        )
        surface.draw_image(frame, decision.frame_rect)
        surface.decision = decision
        surface.frame_applied = True

        logger.debug(
            f"Composited '{variant.id}' ({decision.mode.value}) "
            f"onto {base.width}x{base.height} photo -> {surface.width}x{surface.height}"
        )
        return surface

    def get_metrics(self) -> dict:
        """Get compositor metrics for observability."""
        return {
            "composite_count": self._composite_count,
            "degraded_count": self._degraded_count,
        }
