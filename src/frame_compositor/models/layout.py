"""
Layout Decision Models
======================

Pure data produced by the layout policy for one composite.

All coordinates are in CANVAS SPACE (pixels, origin top-left, x right,
y down). Rectangles keep float precision; rounding to whole pixels
happens only when drawing.
"""

from dataclasses import dataclass
from typing import Optional

from frame_compositor.models.variant import Anchor, LayoutMode


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned placement rectangle."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True, slots=True)
class CircleClip:
    """Circular clip region."""

    cx: float
    cy: float
    radius: float


@dataclass(frozen=True, slots=True)
class LayoutDecision:
    """
    Canvas size and placements for one composite.

    Attributes:
        canvas_width: Surface width in pixels (> 0)
        canvas_height: Surface height in pixels (> 0)
        mode: Layout behavior class
        base_rect: Where the base photo is drawn
        clip: Circle the base photo is clipped to (CIRCULAR only)
        frame_rect: Where the frame is drawn (None until frame size is known)
        anchor: Pin position (ANCHORED_SCALED only)
        scale_fraction: Max frame width as fraction of canvas (ANCHORED_SCALED only)
        padding_px: Edge padding (ANCHORED_SCALED only)
    """

    canvas_width: int
    canvas_height: int
    mode: LayoutMode
    base_rect: Rect
    clip: Optional[CircleClip] = None
    frame_rect: Optional[Rect] = None
    anchor: Optional[Anchor] = None
    scale_fraction: Optional[float] = None
    padding_px: Optional[int] = None

    def __post_init__(self) -> None:
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(
                f"Canvas dimensions must be positive, got "
                f"{self.canvas_width}x{self.canvas_height}"
            )

    @property
    def canvas_size(self) -> tuple:
        """(width, height) of the canvas."""
        return (self.canvas_width, self.canvas_height)
