"""
Source Image
============

Decoded bitmap handed from the raster loader to the compositor.

Design Rules:
    - Pixels are always 8-bit BGRA, shape (height, width, 4)
    - The pixel array is read-only; the compositor borrows it for one
      composite and never writes to it
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class SourceImage:
    """
    Decoded raster image.

    Attributes:
        ref: Reference the image was loaded from
        width: Pixel width (> 0)
        height: Pixel height (> 0)
        pixels: Read-only BGRA array, dtype=uint8
    """

    ref: str
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive: {self.width}x{self.height}")
        if self.pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} does not match "
                f"{self.width}x{self.height} BGRA"
            )

    @classmethod
    def from_array(cls, ref: str, pixels: np.ndarray) -> "SourceImage":
        """Wrap a BGRA array, freezing it."""
        pixels.setflags(write=False)
        height, width = pixels.shape[:2]
        return cls(ref=ref, width=int(width), height=int(height), pixels=pixels)

    @property
    def size(self) -> tuple:
        """(width, height)"""
        return (self.width, self.height)

    @property
    def aspect(self) -> float:
        """Width over height."""
        return self.width / self.height

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        ref = self.ref if len(self.ref) <= 40 else self.ref[:37] + "..."
        return f"SourceImage(ref={ref!r}, size={self.width}x{self.height})"
