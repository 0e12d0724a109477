"""
Test Configuration
==================

Pytest fixtures and test configuration for the frame compositor.

Images are generated in memory with numpy and encoded with OpenCV, so
no test touches the network or ships binary fixtures.
"""

import base64

import cv2
import numpy as np
import pytest


# BGRA colors
RED = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)
BLUE = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)
CLEAR = (0, 0, 0, 0)


def _solid(width, height, color):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    return image


def _to_data_uri(image, ext=".png", mime="image/png"):
    ok, buf = cv2.imencode(ext, image)
    assert ok
    return f"data:{mime};base64,{base64.b64encode(buf.tobytes()).decode('ascii')}"


@pytest.fixture
def solid_image():
    """Factory: solid BGRA array of the given size and color."""
    return _solid


@pytest.fixture
def png_uri():
    """Factory: PNG data URI of a solid color image."""

    def make(width, height, color=RED):
        return _to_data_uri(_solid(width, height, color))

    return make


@pytest.fixture
def array_uri():
    """Factory: PNG data URI of an arbitrary BGRA array."""
    return _to_data_uri


@pytest.fixture
def border_frame_uri():
    """Factory: transparent PNG frame with an opaque border."""

    def make(width, height, border=10, color=BLUE):
        image = _solid(width, height, CLEAR)
        image[:border, :] = color
        image[-border:, :] = color
        image[:, :border] = color
        image[:, -border:] = color
        return _to_data_uri(image)

    return make


@pytest.fixture
def broken_uri():
    """Data URI whose payload is valid base64 but not an image."""
    return "data:image/png;base64," + base64.b64encode(b"definitely not a png").decode("ascii")
