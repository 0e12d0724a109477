"""
Layout Module
=============

Canvas sizing and frame placement rules.

Components:
    - LayoutPolicy: Deterministic policy over the closed set of layout classes
    - LayoutThresholds: Sizing constants (from config)
    - decide: Convenience wrapper using default thresholds
"""

from frame_compositor.layout.policy import (
    LayoutPolicy,
    LayoutThresholds,
    capped_size,
    circle_radius,
    circular_side,
    cover_rect,
    decide,
)


__all__ = [
    "LayoutPolicy",
    "LayoutThresholds",
    "capped_size",
    "circle_radius",
    "circular_side",
    "cover_rect",
    "decide",
]
