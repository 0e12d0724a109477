"""
Data Models
===========

Models shared by the layout policy, compositor and catalogue.

Models:
    Variants:
        - FrameVariant: Immutable catalogue entry
        - VariantLayout: Layout tag derived from a variant id
        - LayoutMode, Anchor: Closed sets of layout behaviors

    Layout:
        - Rect, CircleClip: Canvas-space geometry
        - LayoutDecision: Canvas size and placements for one composite
"""

from frame_compositor.models.variant import (
    Anchor,
    FrameVariant,
    LayoutMode,
    VariantLayout,
    classify_variant,
)
from frame_compositor.models.layout import CircleClip, LayoutDecision, Rect

__all__ = [
    # Variants
    "Anchor",
    "FrameVariant",
    "LayoutMode",
    "VariantLayout",
    "classify_variant",
    # Layout
    "CircleClip",
    "LayoutDecision",
    "Rect",
]
