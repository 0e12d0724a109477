"""
Raster Loader
=============

Async loader turning an image reference into a decoded SourceImage.

Supported references:
    - data:image/png;base64,...   decoded in-process
    - http(s)://...               fetched with requests in a worker thread
    - file:///... or a plain path read from disk

Cross-Origin Policy:
    Remote assets are requested the way an "anonymous" CORS request is
    made: an Origin header is always sent (DEFAULT_ORIGIN when none is
    configured) and the response must carry an
    Access-Control-Allow-Origin header admitting that origin (or "*").
    A response that does not is reported as TaintedSourceError instead of
    producing a surface that could not be exported.

Caching:
    Optional LRU cache of decoded images keyed by reference. invalidate()
    drops everything; the frame catalogue calls it on reload.

Example:
    loader = RasterLoader(http_timeout=10.0)
    image = await loader.load("https://example.com/frame1.png")
    print(image.width, image.height)
"""

import asyncio
import logging
import mimetypes
from collections import OrderedDict
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from frame_compositor.raster.decoder import (
    decode_image_bytes,
    encode_data_uri,
    parse_data_uri,
)
from frame_compositor.raster.errors import (
    DecodeError,
    FetchError,
    RasterLoadError,
    TaintedSourceError,
)
from frame_compositor.raster.source import SourceImage


logger = logging.getLogger(__name__)

# Origin sent when none is configured: the opaque origin a browser uses
# for pages without a web origin
DEFAULT_ORIGIN = "null"


class RasterLoader:
    """
    Loads and decodes raster images from data URIs, URLs and files.

    Attributes:
        http_timeout: Seconds before a remote request is abandoned
        enforce_cors: Whether remote assets must allow cross-origin use
        origin: Origin header sent with every remote request
        cache_size: Max decoded images kept (0 = no cache)
    """

    def __init__(
        self,
        http_timeout: float = 15.0,
        enforce_cors: bool = True,
        origin: Optional[str] = None,
        user_agent: str = "frame-compositor/0.1",
        cache_size: int = 0,
    ) -> None:
        """
        Initialize raster loader.

        Args:
            http_timeout: Timeout for remote requests in seconds
            enforce_cors: Reject remote assets without a permissive
                Access-Control-Allow-Origin header
            origin: Origin header value; None sends DEFAULT_ORIGIN
            user_agent: User-Agent header for remote requests
            cache_size: Number of decoded images to keep (0 disables)
        """
        if cache_size < 0:
            raise ValueError("cache_size must be >= 0")

        self.http_timeout = http_timeout
        self.enforce_cors = enforce_cors
        self.origin = origin or DEFAULT_ORIGIN
        self.user_agent = user_agent
        self.cache_size = cache_size

        self._cache: "OrderedDict[str, SourceImage]" = OrderedDict()

        # Metrics
        self._load_count: int = 0
        self._cache_hits: int = 0
        self._error_count: int = 0

    @classmethod
    def from_settings(cls, settings) -> "RasterLoader":
        """Build a loader from the ``loader`` config section."""
        cfg = settings.loader
        return cls(
            http_timeout=cfg.http_timeout_seconds,
            enforce_cors=cfg.enforce_cors,
            origin=cfg.origin,
            user_agent=cfg.user_agent,
            cache_size=cfg.cache_size,
        )

    async def load(self, ref: str) -> SourceImage:
        """
        Load and decode an image reference.

        Args:
            ref: Data URI, http(s) URL, file URI or filesystem path

        Returns:
            Decoded SourceImage

        Raises:
            FetchError: If the reference cannot be retrieved
            DecodeError: If the payload is not a raster image
            TaintedSourceError: If a remote asset forbids cross-origin use
        """
        self._load_count += 1

        cached = self._cache_get(ref)
        if cached is not None:
            self._cache_hits += 1
            return cached

        try:
            data = await self._read(ref)
            pixels = await asyncio.to_thread(decode_image_bytes, data, ref)
        except RasterLoadError:
            self._error_count += 1
            raise

        image = SourceImage.from_array(ref, pixels)
        self._cache_put(ref, image)

        logger.debug(f"Loaded {image!r}")
        return image

    def invalidate(self) -> int:
        """
        Drop all cached images.

        Returns:
            Number of entries removed.
        """
        cleared = len(self._cache)
        self._cache.clear()
        if cleared:
            logger.info(f"Raster cache invalidated ({cleared} entries)")
        return cleared

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    async def _read(self, ref: str) -> bytes:
        """Fetch the encoded bytes behind a reference."""
        if ref.startswith("data:"):
            mime_type, payload = parse_data_uri(ref)
            if not mime_type.startswith("image/"):
                raise DecodeError(ref, f"Data URI is not an image: {mime_type}")
            return payload

        scheme = urlparse(ref).scheme.lower()

        if scheme in ("http", "https"):
            return await asyncio.to_thread(self._fetch_http, ref)

        if scheme == "file":
            path = Path(url2pathname(urlparse(ref).path))
            return await asyncio.to_thread(self._read_file, ref, path)

        # Windows drive letters parse as a one-letter scheme
        if scheme == "" or len(scheme) == 1:
            return await asyncio.to_thread(self._read_file, ref, Path(ref))

        raise FetchError(ref, f"Unsupported reference scheme: {scheme}")

    def _fetch_http(self, ref: str) -> bytes:
        """Blocking HTTP GET, run in a worker thread."""
        headers = {"User-Agent": self.user_agent, "Origin": self.origin}

        try:
            response = requests.get(ref, headers=headers, timeout=self.http_timeout)
        except requests.RequestException as e:
            raise FetchError(ref, f"Request failed: {e}") from e

        if not response.ok:
            raise FetchError(ref, f"HTTP {response.status_code}")

        self._check_cors(ref, response)
        return response.content

    def _check_cors(self, ref: str, response: requests.Response) -> None:
        """Ensure a remote response may be drawn onto an exportable surface."""
        if not self.enforce_cors:
            return

        allowed = response.headers.get("Access-Control-Allow-Origin")
        if allowed is None:
            raise TaintedSourceError(ref, "Response has no Access-Control-Allow-Origin header")

        allowed = allowed.strip()
        if allowed == "*":
            return
        if allowed == self.origin:
            return

        raise TaintedSourceError(
            ref, f"Access-Control-Allow-Origin '{allowed}' does not admit origin {self.origin!r}"
        )

    @staticmethod
    def _read_file(ref: str, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise FetchError(ref, f"Cannot read file: {e}") from e

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def _cache_get(self, ref: str) -> Optional[SourceImage]:
        if self.cache_size == 0:
            return None
        image = self._cache.get(ref)
        if image is not None:
            self._cache.move_to_end(ref)
        return image

    def _cache_put(self, ref: str, image: SourceImage) -> None:
        if self.cache_size == 0:
            return
        self._cache[ref] = image
        self._cache.move_to_end(ref)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    @property
    def cached_count(self) -> int:
        """Images currently cached."""
        return len(self._cache)

    def get_metrics(self) -> dict:
        """Get loader metrics for observability."""
        return {
            "load_count": self._load_count,
            "cache_hits": self._cache_hits,
            "error_count": self._error_count,
            "cached": len(self._cache),
        }


def file_to_data_uri(path: Union[str, Path]) -> str:
    """
    Read a local photo into a data URI.

    Only files whose MIME type (guessed from the extension) is image/*
    are accepted.

    Raises:
        DecodeError: If the file is not an image type
        FetchError: If the file cannot be read
    """
    path = Path(path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None or not mime_type.startswith("image/"):
        raise DecodeError(str(path), f"Not an image file: {mime_type or 'unknown type'}")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise FetchError(str(path), f"Cannot read file: {e}") from e

    return encode_data_uri(data, mime_type)
