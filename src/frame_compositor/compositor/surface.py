"""
Composite Surface
=================

Pixel buffer a composite is drawn into.

Drawing Model:
    - Buffer is uint8 BGRA, created fully transparent
    - draw_image() scales a source into a rectangle (which may extend past
      the canvas edges), optionally clips it to a circle, and blends it
      with source-over alpha compositing
    - Only the visible window of an enlarged rectangle is scaled
    - Anti-aliased circle edges via cv2.LINE_AA

Design Rules:
    - One surface per composite, owned by the caller
    - Never shared between composites
"""

import logging
from typing import Optional, Union

import cv2
import numpy as np

from frame_compositor.models.layout import CircleClip, LayoutDecision, Rect
from frame_compositor.raster.decoder import encode_data_uri
from frame_compositor.raster.errors import RasterLoadError
from frame_compositor.raster.source import SourceImage


logger = logging.getLogger(__name__)

# Fixed-point bits used when rasterizing circle clips
_CIRCLE_SHIFT = 4

_FORMATS = {
    "png": (".png", "image/png"),
    "jpeg": (".jpg", "image/jpeg"),
    "jpg": (".jpg", "image/jpeg"),
    "webp": (".webp", "image/webp"),
}


class ExportError(Exception):
    """Raised when a surface cannot be encoded."""
    pass


class CompositeSurface:
    """
    Drawing target for one composite.

    Attributes:
        width: Canvas width in pixels
        height: Canvas height in pixels
        decision: Layout the surface was drawn with
        frame_applied: Whether the frame asset was drawn
        frame_error: Frame load failure that left the surface base-only
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface dimensions must be positive: {width}x{height}")

        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

        self.decision: Optional[LayoutDecision] = None
        self.frame_applied: bool = False
        self.frame_error: Optional[RasterLoadError] = None

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def size(self) -> tuple:
        """(width, height)"""
        return (self.width, self.height)

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the BGRA buffer."""
        view = self._pixels.view()
        view.setflags(write=False)
        return view

    @property
    def degraded(self) -> bool:
        """True when a frame was requested but could not be loaded."""
        return self.frame_error is not None

    def clear(self) -> None:
        """Reset every pixel to transparent."""
        self._pixels.fill(0)

    def is_blank(self) -> bool:
        """True when nothing visible has been drawn."""
        return not np.any(self._pixels[..., 3])

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def draw_image(
        self,
        image: Union[SourceImage, np.ndarray],
        rect: Rect,
        clip: Optional[CircleClip] = None,
    ) -> None:
        """
        Draw an image scaled into a rectangle.

        Args:
            image: SourceImage or BGRA array
            rect: Destination rectangle in canvas space
            clip: Optional circle outside of which nothing is drawn
        """
        src = image.pixels if isinstance(image, SourceImage) else image
        src_h, src_w = src.shape[:2]

        dst_w = max(1, int(round(rect.width)))
        dst_h = max(1, int(round(rect.height)))
        x0 = int(round(rect.x))
        y0 = int(round(rect.y))

        # Visible part of the destination rectangle
        vx0 = max(x0, 0)
        vy0 = max(y0, 0)
        vx1 = min(x0 + dst_w, self.width)
        vy1 = min(y0 + dst_h, self.height)
        if vx0 >= vx1 or vy0 >= vy1:
            logger.debug(f"draw_image: {rect} lies outside {self.width}x{self.height}")
            return

        fully_visible = (vx1 - vx0, vy1 - vy0) == (dst_w, dst_h)
        shrinking = dst_w < src_w and dst_h < src_h

        if (dst_w, dst_h) == (src_w, src_h):
            patch = src[vy0 - y0:vy1 - y0, vx0 - x0:vx1 - x0]
        elif fully_visible or shrinking:
            # Output is no larger than the canvas or the source
            interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR
            scaled = cv2.resize(src, (dst_w, dst_h), interpolation=interpolation)
            patch = scaled[vy0 - y0:vy1 - y0, vx0 - x0:vx1 - x0]
        else:
            patch = self._scaled_window(src, dst_w, dst_h, vx0 - x0, vy0 - y0, vx1 - vx0, vy1 - vy0)

        alpha = patch[..., 3].astype(np.float32) / 255.0

        if clip is not None:
            mask = self._circle_mask(clip)[vy0:vy1, vx0:vx1]
            alpha *= mask.astype(np.float32) / 255.0

        self._blend(vx0, vy0, vx1, vy1, patch[..., :3], alpha)

    @staticmethod
    def _scaled_window(
        src: np.ndarray,
        dst_w: int,
        dst_h: int,
        offset_x: int,
        offset_y: int,
        win_w: int,
        win_h: int,
    ) -> np.ndarray:
        """
        Window of src scaled to dst_w x dst_h, without scaling the rest.

        Same pixel-center mapping as cv2.resize with INTER_LINEAR, so an
        enlarged rectangle hanging far past the canvas costs only the
        visible pixels.
        """
        src_h, src_w = src.shape[:2]
        fx = src_w / dst_w
        fy = src_h / dst_h
        # dst -> src, applied with WARP_INVERSE_MAP
        matrix = np.array(
            [
                [fx, 0.0, (offset_x + 0.5) * fx - 0.5],
                [0.0, fy, (offset_y + 0.5) * fy - 0.5],
            ],
            dtype=np.float64,
        )
        return cv2.warpAffine(
            src,
            matrix,
            (win_w, win_h),
            flags=cv2.INTER_LINEAR | cv2.WARP_INVERSE_MAP,
            borderMode=cv2.BORDER_REPLICATE,
        )

    def _circle_mask(self, clip: CircleClip) -> np.ndarray:
        scale = 1 << _CIRCLE_SHIFT
        mask = np.zeros((self.height, self.width), dtype=np.uint8)
        cv2.circle(
            mask,
            (int(round(clip.cx * scale)), int(round(clip.cy * scale))),
            int(round(clip.radius * scale)),
            255,
            thickness=-1,
            lineType=cv2.LINE_AA,
            shift=_CIRCLE_SHIFT,
        )
        return mask

    def _blend(
        self,
        x0: int,
        y0: int,
        x1: int,
        y1: int,
        src_bgr: np.ndarray,
        src_alpha: np.ndarray,
    ) -> None:
        """Source-over compositing of non-premultiplied BGRA."""
        dst = self._pixels[y0:y1, x0:x1].astype(np.float32)
        dst_alpha = dst[..., 3:4] / 255.0
        sa = src_alpha[..., None]

        out_alpha = sa + dst_alpha * (1.0 - sa)
        weighted = src_bgr.astype(np.float32) * sa + dst[..., :3] * dst_alpha * (1.0 - sa)
        out_bgr = np.where(out_alpha > 0, weighted / np.maximum(out_alpha, 1e-6), 0.0)

        out = np.empty_like(dst)
        out[..., :3] = out_bgr
        out[..., 3:4] = out_alpha * 255.0
        self._pixels[y0:y1, x0:x1] = np.clip(np.rint(out), 0, 255).astype(np.uint8)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def encode(self, fmt: str = "png", jpeg_quality: int = 92) -> bytes:
        """
        Encode the surface as an image file payload.

        JPEG has no alpha channel, so the surface is flattened onto white.

        Raises:
            ExportError: On unknown format or encoder failure
        """
        fmt = fmt.lower()
        if fmt not in _FORMATS:
            raise ExportError(f"Unsupported export format: {fmt}")
        extension, _ = _FORMATS[fmt]

        params = []
        image = self._pixels
        if extension == ".jpg":
            image = self._flatten()
            params = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]

        ok, buffer = cv2.imencode(extension, image, params)
        if not ok:
            raise ExportError(f"Encoder failed for format: {fmt}")
        return buffer.tobytes()

    def to_data_url(self, fmt: str = "png") -> str:
        """Encode the surface as a ``data:`` URL."""
        payload = self.encode(fmt)
        return encode_data_uri(payload, _FORMATS[fmt.lower()][1])

    def _flatten(self, background: int = 255) -> np.ndarray:
        alpha = self._pixels[..., 3:4].astype(np.float32) / 255.0
        bgr = self._pixels[..., :3].astype(np.float32)
        flat = bgr * alpha + background * (1.0 - alpha)
        return np.clip(np.rint(flat), 0, 255).astype(np.uint8)

    def __repr__(self) -> str:
        mode = self.decision.mode.value if self.decision else None
        return (
            f"CompositeSurface({self.width}x{self.height}, mode={mode}, "
            f"frame_applied={self.frame_applied})"
        )
