"""
Frame Variant Models
====================

This module defines the selectable frame variants and their layout classes.

Design Philosophy:
    A variant's layout behavior is decided ONCE, when the variant is
    created from a catalogue entry. The id is looked up in a policy table
    and turned into a VariantLayout tag; downstream code switches on the
    tag and never compares id strings again.

Default Policy Table:
    frame1, frame3  -> CIRCULAR
    frame2          -> FULL_BLEED
    frame4          -> ANCHORED_SCALED (bottom-center)
    frame5, frame6  -> ANCHORED_SCALED (bottom-left)
    anything else   -> FALLBACK

Example:
    from frame_compositor.models.variant import FrameVariant

    variant = FrameVariant(
        id="frame4",
        display_name="Frame4",
        asset_ref="https://example.com/frame4.png",
    )
    assert variant.layout.mode == LayoutMode.ANCHORED_SCALED
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


logger = logging.getLogger(__name__)


class LayoutMode(str, Enum):
    """
    Closed set of frame layout behaviors.

    Attributes:
        CIRCULAR: Photo cropped to a circle on a square canvas
        FULL_BLEED: Frame stretched over the whole canvas
        ANCHORED_SCALED: Frame scaled and pinned to a canvas edge
        FALLBACK: Unrecognized variant (or no frame), full-bleed equivalent
    """

    CIRCULAR = "circular"
    FULL_BLEED = "full_bleed"
    ANCHORED_SCALED = "anchored_scaled"
    FALLBACK = "fallback"


class Anchor(str, Enum):
    """Edge an anchored frame is pinned to."""

    BOTTOM_CENTER = "bottom_center"
    BOTTOM_LEFT = "bottom_left"


class VariantLayout(BaseModel):
    """
    Layout tag attached to a variant.

    Attributes:
        mode: Behavior class
        anchor: Pin position, set only for ANCHORED_SCALED
    """

    model_config = ConfigDict(frozen=True)

    mode: LayoutMode = Field(..., description="Layout behavior class")
    anchor: Optional[Anchor] = Field(
        default=None,
        description="Pin position for anchored frames",
    )

    @model_validator(mode="after")
    def check_anchor(self) -> "VariantLayout":
        """Anchored layouts need an anchor, other layouts must not have one."""
        if self.mode == LayoutMode.ANCHORED_SCALED and self.anchor is None:
            raise ValueError("ANCHORED_SCALED layout requires an anchor")
        if self.mode != LayoutMode.ANCHORED_SCALED and self.anchor is not None:
            raise ValueError(f"{self.mode.value} layout does not take an anchor")
        return self

    @property
    def description(self) -> str:
        """Short human label shown next to the frame in a picker."""
        if self.mode == LayoutMode.CIRCULAR:
            return "Circular • Profile Picture"
        if self.mode == LayoutMode.FULL_BLEED:
            return "Full Coverage"
        if self.mode == LayoutMode.ANCHORED_SCALED:
            if self.anchor == Anchor.BOTTOM_CENTER:
                return "Bottom Center • Large Frame"
            return "Bottom Left • Large Frame"
        return "Standard Frame"


CIRCULAR = VariantLayout(mode=LayoutMode.CIRCULAR)
FULL_BLEED = VariantLayout(mode=LayoutMode.FULL_BLEED)
BOTTOM_CENTER = VariantLayout(mode=LayoutMode.ANCHORED_SCALED, anchor=Anchor.BOTTOM_CENTER)
BOTTOM_LEFT = VariantLayout(mode=LayoutMode.ANCHORED_SCALED, anchor=Anchor.BOTTOM_LEFT)
FALLBACK = VariantLayout(mode=LayoutMode.FALLBACK)

VARIANT_LAYOUTS: Dict[str, VariantLayout] = {
    "frame1": CIRCULAR,
    "frame3": CIRCULAR,
    "frame2": FULL_BLEED,
    "frame4": BOTTOM_CENTER,
    "frame5": BOTTOM_LEFT,
    "frame6": BOTTOM_LEFT,
}

# Names accepted for an explicit ``layout:`` key in catalogue files
LAYOUT_NAMES: Dict[str, VariantLayout] = {
    "circular": CIRCULAR,
    "full_bleed": FULL_BLEED,
    "bottom_center": BOTTOM_CENTER,
    "bottom_left": BOTTOM_LEFT,
    "fallback": FALLBACK,
}


def classify_variant(variant_id: str) -> VariantLayout:
    """
    Map a variant id to its layout tag.

    Unknown ids are not an error: they are logged and get FALLBACK.
    """
    layout = VARIANT_LAYOUTS.get(variant_id)
    if layout is None:
        logger.info(f"Unrecognized frame variant '{variant_id}', using fallback layout")
        return FALLBACK
    return layout


def layout_from_name(name: str) -> VariantLayout:
    """
    Resolve an explicit layout name from a catalogue file.

    Raises:
        ValueError: If the name is not one of LAYOUT_NAMES
    """
    key = name.strip().lower().replace("-", "_")
    try:
        return LAYOUT_NAMES[key]
    except KeyError:
        raise ValueError(
            f"Unknown layout '{name}', expected one of {sorted(LAYOUT_NAMES)}"
        ) from None


class FrameVariant(BaseModel):
    """
    Immutable descriptor of a selectable frame.

    Identity is ``id``. The layout tag is derived from the id when the
    variant is built unless one is supplied explicitly.

    Attributes:
        id: Variant identifier (e.g. "frame1")
        display_name: Label shown to the user
        asset_ref: Data URI, URL or path of the frame raster
        layout: Layout tag used by the layout policy
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Variant identifier")
    display_name: str = Field(..., description="Human readable name")
    asset_ref: str = Field(..., min_length=1, description="Frame asset reference")
    layout: VariantLayout = Field(..., description="Layout tag")

    @model_validator(mode="before")
    @classmethod
    def derive_layout(cls, data: Any) -> Any:
        """Classify the id when no layout was given."""
        if isinstance(data, dict):
            layout = data.get("layout")
            if layout is None and "id" in data:
                data = {**data, "layout": classify_variant(data["id"])}
            elif isinstance(layout, str):
                data = {**data, "layout": layout_from_name(layout)}
        return data
