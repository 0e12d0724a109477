"""
Layout Policy
=============

Pure mapping from (variant layout, base size, frame size) to a LayoutDecision.

Layout Classes:
    CIRCULAR:
        Square canvas, side = min(600, max(w, h)). The photo is scaled to
        cover a circle of radius side/2 - 20 and clipped to it; the frame
        is stretched over the whole square.

    FULL_BLEED / FALLBACK:
        Capped canvas (see below). Frame stretched to exactly cover the
        canvas, ignoring its own aspect ratio.

    ANCHORED_SCALED:
        Capped canvas. Frame keeps its aspect ratio, width =
        min(70% of canvas width, frame native width), 10px from the
        bottom edge, horizontally centered or 10px from the left edge.

Capped Sizing:
    Scale down (never up), preserving aspect ratio, so that width <= 800
    and then height <= 600. Results are truncated to whole pixels.

Design Rules:
    - No I/O, no drawing, no hidden state
    - Canvas size never depends on the frame asset, so a frame that fails
      to load cannot change the surface the photo was drawn on
    - Circular sizing is ONE function; feeding its output back in yields
      the same side
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from frame_compositor.models.layout import CircleClip, LayoutDecision, Rect
from frame_compositor.models.variant import (
    FALLBACK,
    Anchor,
    FrameVariant,
    LayoutMode,
    VariantLayout,
    classify_variant,
)


logger = logging.getLogger(__name__)


LayoutInput = Union[VariantLayout, FrameVariant, str, None]


@dataclass
class LayoutThresholds:
    """
    Sizing and placement constants.

    Loaded from the ``layout`` config section.
    """

    # Circular canvas
    circular_max_side: int = 600
    circular_padding: int = 20

    # Capped canvas
    max_width: int = 800
    max_height: int = 600

    # Anchored frames
    anchored_width_fraction: float = 0.7
    anchored_padding: int = 10

    @classmethod
    def from_settings(cls, settings) -> "LayoutThresholds":
        cfg = settings.layout
        return cls(
            circular_max_side=cfg.circular_max_side,
            circular_padding=cfg.circular_padding,
            max_width=cfg.max_width,
            max_height=cfg.max_height,
            anchored_width_fraction=cfg.anchored_width_fraction,
            anchored_padding=cfg.anchored_padding,
        )


# =============================================================================
# Sizing Functions
# =============================================================================

def circular_side(width: int, height: int, max_side: int = 600) -> int:
    """Side of the square canvas used for circular frames."""
    return max(1, min(max_side, max(width, height)))


def capped_size(
    width: int,
    height: int,
    max_width: int = 800,
    max_height: int = 600,
) -> Tuple[int, int]:
    """
    Scale (width, height) down to fit max_width x max_height.

    Width is capped first, then the resulting height. Never scales up.
    """
    w = float(width)
    h = float(height)

    if w > max_width:
        h = h * max_width / w
        w = float(max_width)

    if h > max_height:
        w = w * max_height / h
        h = float(max_height)

    return max(1, int(w)), max(1, int(h))


def circle_radius(side: int, padding: int = 20) -> float:
    """
    Radius of the photo circle inside a square of the given side.

    When the padding would leave no circle at all the full half-side is used.
    """
    radius = side / 2 - padding
    if radius <= 0:
        return side / 2
    return radius


def cover_rect(
    image_width: int,
    image_height: int,
    cx: float,
    cy: float,
    radius: float,
) -> Rect:
    """Rectangle that scales an image to cover a circle, centered on it."""
    aspect = image_width / image_height
    diameter = radius * 2

    if aspect > 1:
        draw_height = diameter
        draw_width = draw_height * aspect
    else:
        draw_width = diameter
        draw_height = draw_width / aspect

    return Rect(
        x=cx - draw_width / 2,
        y=cy - draw_height / 2,
        width=draw_width,
        height=draw_height,
    )


# =============================================================================
# Policy
# =============================================================================

class LayoutPolicy:
    """
    Deterministic layout policy.

    Example:
        policy = LayoutPolicy()
        decision = policy.decide("frame1", 1200, 800, 512, 512)
        assert decision.canvas_size == (600, 600)
    """

    def __init__(self, thresholds: Optional[LayoutThresholds] = None) -> None:
        self.thresholds = thresholds or LayoutThresholds()

    def resolve(self, layout: LayoutInput) -> VariantLayout:
        """Turn any accepted layout input into a VariantLayout tag."""
        if layout is None:
            return FALLBACK
        if isinstance(layout, VariantLayout):
            return layout
        if isinstance(layout, FrameVariant):
            return layout.layout
        return classify_variant(layout)

    def decide(
        self,
        layout: LayoutInput,
        base_width: int,
        base_height: int,
        frame_width: Optional[int] = None,
        frame_height: Optional[int] = None,
    ) -> LayoutDecision:
        """
        Decide canvas size and placements.

        Args:
            layout: VariantLayout, FrameVariant, variant id, or None (no frame)
            base_width: Native width of the photo
            base_height: Native height of the photo
            frame_width: Native width of the frame asset, if loaded
            frame_height: Native height of the frame asset, if loaded

        Returns:
            LayoutDecision; frame_rect is None when frame size is not given

        Raises:
            ValueError: On non-positive sizes or a half-specified frame size
        """
        if base_width <= 0 or base_height <= 0:
            raise ValueError(f"Base image size must be positive: {base_width}x{base_height}")
        if (frame_width is None) != (frame_height is None):
            raise ValueError("frame_width and frame_height must be given together")
        if frame_width is not None and (frame_width <= 0 or frame_height <= 0):
            raise ValueError(f"Frame size must be positive: {frame_width}x{frame_height}")

        tag = self.resolve(layout)

        if tag.mode == LayoutMode.CIRCULAR:
            decision = self._decide_circular(base_width, base_height, frame_width)
        elif tag.mode == LayoutMode.ANCHORED_SCALED:
            decision = self._decide_anchored(
                tag.anchor, base_width, base_height, frame_width, frame_height
            )
        else:
            decision = self._decide_stretched(tag.mode, base_width, base_height, frame_width)

        logger.debug(
            f"Layout {tag.mode.value}: base={base_width}x{base_height} "
            f"canvas={decision.canvas_width}x{decision.canvas_height} "
            f"frame_rect={decision.frame_rect}"
        )
        return decision

    def _decide_circular(
        self,
        base_width: int,
        base_height: int,
        frame_width: Optional[int],
    ) -> LayoutDecision:
        th = self.thresholds
        side = circular_side(base_width, base_height, th.circular_max_side)
        center = side / 2
        radius = circle_radius(side, th.circular_padding)

        frame_rect = None
        if frame_width is not None:
            frame_rect = Rect(0.0, 0.0, float(side), float(side))

        return LayoutDecision(
            canvas_width=side,
            canvas_height=side,
            mode=LayoutMode.CIRCULAR,
            base_rect=cover_rect(base_width, base_height, center, center, radius),
            clip=CircleClip(cx=center, cy=center, radius=radius),
            frame_rect=frame_rect,
        )

    def _decide_stretched(
        self,
        mode: LayoutMode,
        base_width: int,
        base_height: int,
        frame_width: Optional[int],
    ) -> LayoutDecision:
        th = self.thresholds
        width, height = capped_size(base_width, base_height, th.max_width, th.max_height)
        full = Rect(0.0, 0.0, float(width), float(height))

        return LayoutDecision(
            canvas_width=width,
            canvas_height=height,
            mode=mode,
            base_rect=full,
            frame_rect=full if frame_width is not None else None,
        )

    def _decide_anchored(
        self,
        anchor: Anchor,
        base_width: int,
        base_height: int,
        frame_width: Optional[int],
        frame_height: Optional[int],
    ) -> LayoutDecision:
        th = self.thresholds
        width, height = capped_size(base_width, base_height, th.max_width, th.max_height)

        frame_rect = None
        if frame_width is not None:
            frame_rect = self.place_anchored(anchor, width, height, frame_width, frame_height)

        return LayoutDecision(
            canvas_width=width,
            canvas_height=height,
            mode=LayoutMode.ANCHORED_SCALED,
            base_rect=Rect(0.0, 0.0, float(width), float(height)),
            frame_rect=frame_rect,
            anchor=anchor,
            scale_fraction=th.anchored_width_fraction,
            padding_px=th.anchored_padding,
        )

    def place_anchored(
        self,
        anchor: Anchor,
        canvas_width: int,
        canvas_height: int,
        frame_width: int,
        frame_height: int,
    ) -> Rect:
        """
        Placement of an anchored frame.

        Width is min(fraction * canvas width, native width) so the frame is
        never upscaled past its native resolution; height follows the
        frame's own aspect ratio.
        """
        th = self.thresholds
        draw_width = min(canvas_width * th.anchored_width_fraction, float(frame_width))
        draw_height = draw_width * frame_height / frame_width

        if anchor == Anchor.BOTTOM_CENTER:
            x = (canvas_width - draw_width) / 2
        else:
            x = float(th.anchored_padding)
        y = canvas_height - draw_height - th.anchored_padding

        return Rect(x=x, y=y, width=draw_width, height=draw_height)


_default_policy = LayoutPolicy()


def decide(
    layout: LayoutInput,
    base_width: int,
    base_height: int,
    frame_width: Optional[int] = None,
    frame_height: Optional[int] = None,
) -> LayoutDecision:
    """Decide a layout with the default thresholds."""
    return _default_policy.decide(layout, base_width, base_height, frame_width, frame_height)
