"""
Export Sink
===========

Serializes a finished CompositeSurface for download.

Outputs:
    - encode(): raw PNG/JPEG/WebP bytes
    - to_data_url(): data URL suitable for a download link
    - save(): file named "<prefix>-<epoch milliseconds>.<ext>"
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

from frame_compositor.compositor.surface import CompositeSurface, ExportError
from frame_compositor.raster.decoder import encode_data_uri


logger = logging.getLogger(__name__)


_EXTENSIONS = {"png": "png", "jpeg": "jpg", "webp": "webp"}
_MIME_TYPES = {"png": "image/png", "jpeg": "image/jpeg", "webp": "image/webp"}


class ExportSink:
    """
    Encodes surfaces and writes them to disk.

    Attributes:
        fmt: Output format (png, jpeg or webp)
        filename_prefix: Prefix of generated file names
        jpeg_quality: JPEG quality 1-100
    """

    def __init__(
        self,
        fmt: str = "png",
        filename_prefix: str = "framed",
        jpeg_quality: int = 92,
    ) -> None:
        fmt = fmt.lower()
        if fmt == "jpg":
            fmt = "jpeg"
        if fmt not in _EXTENSIONS:
            raise ValueError(f"Unsupported export format: {fmt}")

        self.fmt = fmt
        self.filename_prefix = filename_prefix
        self.jpeg_quality = jpeg_quality

    @classmethod
    def from_settings(cls, settings) -> "ExportSink":
        cfg = settings.export
        return cls(
            fmt=cfg.format,
            filename_prefix=cfg.filename_prefix,
            jpeg_quality=cfg.jpeg_quality,
        )

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self.fmt]

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self.fmt]

    def encode(self, surface: CompositeSurface) -> bytes:
        """
        Encode a surface.

        Raises:
            ExportError: If encoding fails
        """
        if surface.is_blank():
            logger.warning(f"Exporting a fully transparent {surface.width}x{surface.height} surface")
        return surface.encode(self.fmt, jpeg_quality=self.jpeg_quality)

    def to_data_url(self, surface: CompositeSurface) -> str:
        return encode_data_uri(self.encode(surface), self.mime_type)

    def filename(self, now: Optional[float] = None) -> str:
        """Download file name stamped with epoch milliseconds."""
        if now is None:
            now = time.time()
        return f"{self.filename_prefix}-{int(now * 1000)}.{self.extension}"

    def save(
        self,
        surface: CompositeSurface,
        directory: Union[str, Path] = ".",
        now: Optional[float] = None,
    ) -> Path:
        """
        Write the encoded surface into a directory.

        Returns:
            Path of the written file
        """
        payload = self.encode(surface)

        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename(now)
        path.write_bytes(payload)

        logger.info(f"Exported {surface.width}x{surface.height} {self.fmt} to {path}")
        return path
