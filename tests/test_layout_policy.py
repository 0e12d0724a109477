"""
Layout Policy Tests
===================

Canvas sizing and frame placement for every layout class.
"""

import pytest

from frame_compositor.layout import (
    LayoutPolicy,
    LayoutThresholds,
    capped_size,
    circle_radius,
    circular_side,
    decide,
)
from frame_compositor.models import Anchor, FrameVariant, LayoutMode, Rect
from frame_compositor.models.variant import BOTTOM_CENTER, BOTTOM_LEFT, CIRCULAR


class TestCircularSizing:
    """Square canvas sizing for circular frames."""

    @pytest.mark.parametrize(
        "width,height",
        [(1200, 800), (601, 600), (500, 20), (4000, 3999), (300, 200), (2, 1)],
    )
    def test_landscape_side_is_capped_width(self, width, height):
        """width > height: side = min(600, width)."""
        decision = decide("frame1", width, height)
        assert decision.canvas_width == decision.canvas_height
        assert decision.canvas_width == min(600, width)

    @pytest.mark.parametrize(
        "width,height",
        [(800, 1200), (600, 600), (20, 500), (100, 100), (1, 1), (599, 4000)],
    )
    def test_portrait_or_square_side_is_capped_height(self, width, height):
        """height >= width: side = min(600, height)."""
        decision = decide("frame3", width, height)
        assert decision.canvas_size == (min(600, height), min(600, height))

    @pytest.mark.parametrize("width,height", [(1200, 800), (450, 300), (30, 90), (600, 1)])
    def test_side_is_idempotent(self, width, height):
        """Re-deciding from the decided side yields the same side."""
        side = circular_side(width, height)
        assert circular_side(side, side) == side
        assert decide("frame1", side, side).canvas_width == side

    def test_clip_radius_leaves_padding(self):
        """Photo circle radius is side/2 - 20."""
        decision = decide("frame1", 1200, 800)
        assert decision.clip.cx == 300
        assert decision.clip.cy == 300
        assert decision.clip.radius == 280

    def test_landscape_photo_covers_circle(self):
        """Wide photos are scaled to the circle's height and centered."""
        decision = decide("frame1", 1200, 800)
        rect = decision.base_rect
        assert rect.height == pytest.approx(560)
        assert rect.width == pytest.approx(840)
        assert rect.x == pytest.approx(-120)
        assert rect.y == pytest.approx(20)

    def test_portrait_photo_covers_circle(self):
        """Tall photos are scaled to the circle's width and centered."""
        decision = decide("frame1", 400, 800)
        rect = decision.base_rect
        # side 600, radius 280
        assert rect.width == pytest.approx(560)
        assert rect.height == pytest.approx(1120)
        assert rect.x == pytest.approx(20)
        assert rect.y == pytest.approx(300 - 560)

    def test_frame_stretched_over_square(self):
        """Frame covers the full square regardless of its own size."""
        decision = decide("frame1", 1200, 800, 512, 300)
        assert decision.frame_rect == Rect(0.0, 0.0, 600.0, 600.0)

    def test_degenerate_radius_uses_half_side(self):
        """A canvas too small for the padding still gets a circle."""
        assert circle_radius(30, 20) == 15
        assert decide("frame1", 30, 10).clip.radius == 15


class TestCappedSizing:
    """800x600 cap used by non-circular layouts."""

    @pytest.mark.parametrize("width,height", [(800, 600), (1, 1), (640, 480), (799, 10), (10, 600)])
    def test_small_images_unchanged(self, width, height):
        """Images within 800x600 keep their size."""
        assert capped_size(width, height) == (width, height)

    def test_wide_image_scaled_by_width(self):
        """1000x500 scales by 0.8 to 800x400."""
        assert capped_size(1000, 500) == (800, 400)
        assert decide("frame2", 1000, 500).canvas_size == (800, 400)

    def test_tall_image_scaled_by_height(self):
        """Height cap applies after the width cap."""
        assert capped_size(400, 1200) == (200, 600)
        assert capped_size(1600, 1500) == (640, 600)

    def test_never_upscales(self):
        """Small images are not enlarged."""
        width, height = capped_size(120, 80)
        assert (width, height) == (120, 80)

    def test_dimensions_are_positive_ints(self):
        """Extreme aspect ratios still give at least one pixel."""
        width, height = capped_size(100000, 10)
        assert isinstance(width, int) and isinstance(height, int)
        assert width == 800
        assert height == 1


class TestFrameSizeIndependence:
    """Canvas size never depends on the frame asset."""

    @pytest.mark.parametrize("variant_id", ["frame1", "frame2", "frame4", "frame5", "frameX"])
    def test_canvas_same_with_and_without_frame(self, variant_id):
        """Deciding with frame dims keeps the canvas size."""
        without = decide(variant_id, 1000, 700)
        with_frame = decide(variant_id, 1000, 700, 333, 999)
        assert without.canvas_size == with_frame.canvas_size
        assert without.frame_rect is None
        assert with_frame.frame_rect is not None


class TestFullBleed:
    """Full-bleed and fallback placement."""

    @pytest.mark.parametrize("frame_size", [(100, 300), (2000, 50), (800, 400)])
    def test_frame_stretched_to_canvas(self, frame_size):
        """Frame rect equals the canvas regardless of frame aspect."""
        decision = decide("frame2", 1000, 500, *frame_size)
        assert decision.mode == LayoutMode.FULL_BLEED
        assert decision.frame_rect == Rect(0.0, 0.0, 800.0, 400.0)
        assert decision.clip is None

    def test_unknown_variant_falls_back(self):
        """Unrecognized ids degrade to full-bleed-equivalent fallback."""
        decision = decide("sparkles", 1000, 500, 64, 64)
        assert decision.mode == LayoutMode.FALLBACK
        assert decision.frame_rect == Rect(0.0, 0.0, 800.0, 400.0)

    def test_no_frame_uses_capped_canvas(self):
        """No selection behaves like fallback with no frame placement."""
        decision = decide(None, 1000, 500)
        assert decision.mode == LayoutMode.FALLBACK
        assert decision.canvas_size == (800, 400)
        assert decision.base_rect == Rect(0.0, 0.0, 800.0, 400.0)
        assert decision.frame_rect is None


class TestAnchoredScaled:
    """Anchored frame placement."""

    def test_bottom_center_placement(self):
        """frame4: 70% width, centered, 10px from the bottom."""
        decision = decide("frame4", 1000, 500, 1000, 200)
        rect = decision.frame_rect
        assert decision.anchor == Anchor.BOTTOM_CENTER
        assert rect.width == pytest.approx(560)
        assert rect.height == pytest.approx(112)
        assert rect.x == pytest.approx(120)
        assert rect.y == pytest.approx(400 - 112 - 10)

    @pytest.mark.parametrize("variant_id", ["frame5", "frame6"])
    def test_bottom_left_placement(self, variant_id):
        """frame5/6: 10px from the left and bottom edges."""
        decision = decide(variant_id, 1000, 500, 1000, 200)
        assert decision.anchor == Anchor.BOTTOM_LEFT
        assert decision.frame_rect.x == pytest.approx(10)
        assert decision.frame_rect.bottom == pytest.approx(390)

    def test_small_frame_not_upscaled(self):
        """Frames narrower than 70% of the canvas keep native width."""
        decision = decide("frame5", 1000, 500, 300, 100)
        assert decision.frame_rect == Rect(10.0, 290.0, 300.0, 100.0)

    @pytest.mark.parametrize(
        "base,frame",
        [
            ((1000, 500), (1000, 200)),
            ((640, 480), (200, 50)),
            ((300, 900), (500, 500)),
            ((800, 600), (561, 10)),
            ((50, 50), (4000, 1000)),
        ],
    )
    def test_width_bound(self, base, frame):
        """Frame width <= min(0.7 * canvas width, native width)."""
        for layout in (BOTTOM_CENTER, BOTTOM_LEFT):
            decision = decide(layout, *base, *frame)
            bound = min(0.7 * decision.canvas_width, frame[0])
            assert decision.frame_rect.width <= bound + 1e-9
            assert decision.frame_rect.width == pytest.approx(bound)

    def test_aspect_ratio_preserved(self):
        """Frame height follows its native aspect ratio."""
        decision = decide("frame4", 800, 600, 400, 300)
        rect = decision.frame_rect
        assert rect.width / rect.height == pytest.approx(400 / 300)

    def test_decision_records_parameters(self):
        """Anchored decisions carry scale fraction and padding."""
        decision = decide("frame4", 800, 600)
        assert decision.scale_fraction == 0.7
        assert decision.padding_px == 10


class TestPolicyInputs:
    """Input handling and custom thresholds."""

    def test_accepts_variant_and_tag(self):
        """FrameVariant and VariantLayout resolve to the same decision."""
        variant = FrameVariant(id="frame1", display_name="Frame1", asset_ref="x.png")
        policy = LayoutPolicy()
        assert policy.decide(variant, 900, 700) == policy.decide(CIRCULAR, 900, 700)

    def test_explicit_layout_overrides_id(self):
        """A variant's layout tag wins over its id."""
        variant = FrameVariant(
            id="frame1", display_name="Frame1", asset_ref="x.png", layout="bottom_left"
        )
        decision = decide(variant, 900, 700, 100, 100)
        assert decision.mode == LayoutMode.ANCHORED_SCALED

    def test_rejects_half_frame_size(self):
        with pytest.raises(ValueError):
            decide("frame1", 100, 100, 50, None)

    @pytest.mark.parametrize("size", [(0, 10), (10, 0), (-5, 5)])
    def test_rejects_non_positive_base(self, size):
        with pytest.raises(ValueError):
            decide("frame2", *size)

    def test_custom_thresholds(self):
        """Thresholds drive every constant."""
        policy = LayoutPolicy(LayoutThresholds(
            circular_max_side=300,
            circular_padding=5,
            max_width=400,
            max_height=300,
            anchored_width_fraction=0.5,
            anchored_padding=4,
        ))
        assert policy.decide("frame1", 1000, 1000).canvas_size == (300, 300)
        assert policy.decide("frame1", 1000, 1000).clip.radius == 145
        assert policy.decide("frame2", 1000, 500).canvas_size == (400, 200)

        rect = policy.decide("frame5", 1000, 500, 1000, 100).frame_rect
        assert rect == Rect(4.0, 200 - 20 - 4, 200.0, 20.0)
