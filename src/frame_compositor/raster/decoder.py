"""
Image Decoder
=============

Turns encoded image bytes into BGRA numpy arrays.

Design Rules:
    - This is the ONLY place in the codebase that decodes images
    - Output is always uint8 BGRA (H, W, 4)
    - Fails fast on corrupt payloads
"""

import base64
import binascii
import logging
from typing import Tuple
from urllib.parse import unquote_to_bytes

import cv2
import numpy as np

from frame_compositor.raster.errors import DecodeError


logger = logging.getLogger(__name__)


def decode_image_bytes(data: bytes, ref: str = "<bytes>") -> np.ndarray:
    """
    Decode an encoded raster (PNG, JPEG, WebP, ...) to BGRA.

    Args:
        data: Encoded image bytes
        ref: Reference used in error messages

    Returns:
        BGRA image as np.ndarray (H, W, 4), dtype=uint8

    Raises:
        DecodeError: If the payload is empty or not a decodable raster
    """
    if not data:
        raise DecodeError(ref, "Empty image payload")

    nparr = np.frombuffer(data, np.uint8)
    decoded = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if decoded is None:
        raise DecodeError(ref, "Payload is not a decodable raster image")

    return to_bgra(decoded, ref)


def to_bgra(image: np.ndarray, ref: str = "<array>") -> np.ndarray:
    """
    Normalize a decoded image to 8-bit BGRA.

    Accepts grayscale, BGR and BGRA inputs in 8 or 16 bit depth.
    """
    if image.size == 0:
        raise DecodeError(ref, f"Decoded image is empty: shape {image.shape}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise DecodeError(ref, f"Unsupported pixel dtype: {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)

    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if channels == 4:
        return np.ascontiguousarray(image)

    raise DecodeError(ref, f"Unsupported channel count: {channels}")


def parse_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a ``data:`` URI into its MIME type and payload bytes.

    Supports both ``;base64`` and percent-encoded payloads.

    Returns:
        Tuple of (mime_type, payload)

    Raises:
        DecodeError: If the URI is malformed or the base64 is invalid
    """
    if not uri.startswith("data:"):
        raise DecodeError(uri, "Not a data URI")

    header, sep, payload = uri[5:].partition(",")
    if not sep:
        raise DecodeError(uri, "Data URI has no payload separator")

    params = header.split(";")
    mime_type = params[0] or "text/plain"
    is_base64 = "base64" in (p.strip().lower() for p in params[1:])

    if is_base64:
        try:
            return mime_type, base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(uri, f"Base64 decode failed: {e}")

    return mime_type, unquote_to_bytes(payload)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Build a base64 ``data:`` URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
