"""
Raster Loader Tests
===================

Decoding of data URIs and files, remote fetch policy and caching.
"""

import asyncio
import base64

import cv2
import numpy as np
import pytest
import requests

from frame_compositor.raster import (
    DecodeError,
    FetchError,
    RasterLoader,
    SourceImage,
    TaintedSourceError,
    file_to_data_uri,
)
from frame_compositor.raster.decoder import parse_data_uri
from frame_compositor.raster.loader import DEFAULT_ORIGIN


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, content=b"", status_code=200, headers=None):
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}

    @property
    def ok(self):
        return self.status_code < 400


def _png_bytes(width=4, height=3, color=(10, 20, 30, 255)):
    image = np.zeros((height, width, 4), dtype=np.uint8)
    image[:, :] = color
    ok, buf = cv2.imencode(".png", image)
    assert ok
    return buf.tobytes()


@pytest.fixture
def fake_http(monkeypatch):
    """Patch requests.get; returns the list of recorded calls."""
    calls = []
    responses = {}

    def fake_get(url, headers=None, timeout=None):
        calls.append({"url": url, "headers": headers, "timeout": timeout})
        response = responses[url]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr("frame_compositor.raster.loader.requests.get", fake_get)
    fake_get.calls = calls
    fake_get.responses = responses
    return fake_get


class TestDataUris:
    """In-process decoding."""

    def test_png_data_uri(self, png_uri):
        image = asyncio.run(RasterLoader().load(png_uri(7, 5, (1, 2, 3, 255))))
        assert isinstance(image, SourceImage)
        assert image.size == (7, 5)
        assert image.pixels.shape == (5, 7, 4)
        assert tuple(image.pixels[0, 0]) == (1, 2, 3, 255)

    def test_grayscale_becomes_bgra(self, array_uri):
        gray = np.full((6, 8), 200, dtype=np.uint8)
        image = asyncio.run(RasterLoader().load(array_uri(gray)))
        assert image.pixels.shape == (6, 8, 4)
        assert tuple(image.pixels[3, 3]) == (200, 200, 200, 255)

    def test_jpeg_data_uri(self, array_uri):
        bgr = np.full((10, 12, 3), 128, dtype=np.uint8)
        image = asyncio.run(RasterLoader().load(array_uri(bgr, ".jpg", "image/jpeg")))
        assert image.size == (12, 10)
        assert image.pixels[0, 0, 3] == 255

    def test_pixels_read_only(self, png_uri):
        image = asyncio.run(RasterLoader().load(png_uri(2, 2)))
        with pytest.raises(ValueError):
            image.pixels[0, 0, 0] = 1

    def test_invalid_base64(self):
        with pytest.raises(DecodeError):
            asyncio.run(RasterLoader().load("data:image/png;base64,@@not-base64@@"))

    def test_not_an_image_payload(self, broken_uri):
        with pytest.raises(DecodeError):
            asyncio.run(RasterLoader().load(broken_uri))

    def test_non_image_mime(self):
        with pytest.raises(DecodeError):
            asyncio.run(RasterLoader().load("data:text/plain,hello"))

    def test_empty_payload(self):
        with pytest.raises(DecodeError):
            asyncio.run(RasterLoader().load("data:image/png;base64,"))

    def test_percent_encoded_payload(self):
        mime, payload = parse_data_uri("data:image/svg+xml,%3Csvg%3E")
        assert mime == "image/svg+xml"
        assert payload == b"<svg>"


class TestFiles:
    """Local paths and file URIs."""

    def test_plain_path(self, tmp_path):
        path = tmp_path / "photo.png"
        path.write_bytes(_png_bytes(9, 4))
        image = asyncio.run(RasterLoader().load(str(path)))
        assert image.size == (9, 4)

    def test_file_uri(self, tmp_path):
        path = tmp_path / "frame.png"
        path.write_bytes(_png_bytes(3, 3))
        image = asyncio.run(RasterLoader().load(path.as_uri()))
        assert image.size == (3, 3)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError):
            asyncio.run(RasterLoader().load(str(tmp_path / "missing.png")))

    def test_unsupported_scheme(self):
        with pytest.raises(FetchError):
            asyncio.run(RasterLoader().load("ftp://example.com/frame.png"))

    def test_file_to_data_uri(self, tmp_path):
        path = tmp_path / "selfie.png"
        path.write_bytes(_png_bytes())
        uri = file_to_data_uri(path)
        assert uri.startswith("data:image/png;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == _png_bytes()

    def test_file_to_data_uri_rejects_non_images(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(DecodeError):
            file_to_data_uri(path)


class TestRemote:
    """HTTP fetch with cross-origin checks."""

    URL = "https://cdn.example.com/frame1.png"

    def test_wildcard_origin_allowed(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(
            _png_bytes(5, 5), headers={"Access-Control-Allow-Origin": "*"}
        )
        loader = RasterLoader(http_timeout=3.0)
        image = asyncio.run(loader.load(self.URL))
        assert image.size == (5, 5)
        assert fake_http.calls[0]["timeout"] == 3.0

    def test_origin_sent_by_default(self, fake_http, monkeypatch):
        """Servers that only answer CORS when asked still admit the asset."""
        def cors_on_request(url, headers=None, timeout=None):
            fake_http.calls.append({"url": url, "headers": headers, "timeout": timeout})
            cors = {"Access-Control-Allow-Origin": "*"} if "Origin" in (headers or {}) else {}
            return FakeResponse(_png_bytes(), headers=cors)

        monkeypatch.setattr("frame_compositor.raster.loader.requests.get", cors_on_request)

        image = asyncio.run(RasterLoader().load(self.URL))
        assert image.size == (4, 3)
        assert fake_http.calls[0]["headers"]["Origin"] == DEFAULT_ORIGIN

    def test_default_origin_echoed_back(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(
            _png_bytes(), headers={"Access-Control-Allow-Origin": DEFAULT_ORIGIN}
        )
        assert asyncio.run(RasterLoader().load(self.URL)).width == 4

    def test_missing_cors_header_is_tainted(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(_png_bytes())
        with pytest.raises(TaintedSourceError):
            asyncio.run(RasterLoader().load(self.URL))

    def test_other_origin_is_tainted(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(
            _png_bytes(), headers={"Access-Control-Allow-Origin": "https://elsewhere.org"}
        )
        with pytest.raises(TaintedSourceError):
            asyncio.run(RasterLoader(origin="https://framer.app").load(self.URL))

    def test_matching_origin_allowed(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(
            _png_bytes(), headers={"Access-Control-Allow-Origin": "https://framer.app"}
        )
        loader = RasterLoader(origin="https://framer.app")
        asyncio.run(loader.load(self.URL))
        assert fake_http.calls[0]["headers"]["Origin"] == "https://framer.app"

    def test_cors_not_enforced(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(_png_bytes())
        image = asyncio.run(RasterLoader(enforce_cors=False).load(self.URL))
        assert image.width == 4

    def test_http_error_status(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(b"", status_code=404)
        with pytest.raises(FetchError):
            asyncio.run(RasterLoader().load(self.URL))

    def test_network_error(self, fake_http):
        fake_http.responses[self.URL] = requests.ConnectionError("unreachable")
        with pytest.raises(FetchError):
            asyncio.run(RasterLoader().load(self.URL))

    def test_remote_non_image(self, fake_http):
        fake_http.responses[self.URL] = FakeResponse(
            b"<html></html>", headers={"Access-Control-Allow-Origin": "*"}
        )
        with pytest.raises(DecodeError):
            asyncio.run(RasterLoader().load(self.URL))


class TestCache:
    """Optional decoded-image cache."""

    def test_disabled_by_default(self, png_uri):
        loader = RasterLoader()
        uri = png_uri(3, 3)

        async def scenario():
            return await loader.load(uri), await loader.load(uri)

        first, second = asyncio.run(scenario())
        assert first is not second
        assert loader.cached_count == 0

    def test_hits_and_eviction(self, png_uri):
        loader = RasterLoader(cache_size=2)
        a, b, c = png_uri(1, 1), png_uri(2, 2), png_uri(3, 3)

        async def scenario():
            first = await loader.load(a)
            again = await loader.load(a)
            await loader.load(b)
            await loader.load(c)
            return first, again

        first, again = asyncio.run(scenario())
        assert first is again
        assert loader.cached_count == 2
        assert loader.get_metrics()["cache_hits"] == 1

    def test_invalidate(self, png_uri):
        loader = RasterLoader(cache_size=4)
        asyncio.run(loader.load(png_uri(2, 2)))
        assert loader.invalidate() == 1
        assert loader.cached_count == 0

    def test_errors_counted(self, broken_uri):
        loader = RasterLoader()
        with pytest.raises(DecodeError):
            asyncio.run(loader.load(broken_uri))
        assert loader.get_metrics()["error_count"] == 1

    def test_negative_cache_size_rejected(self):
        with pytest.raises(ValueError):
            RasterLoader(cache_size=-1)
