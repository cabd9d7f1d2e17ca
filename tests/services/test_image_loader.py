"""
Tests for downloading receipt images.
"""

import httpx
import pytest

from raseed.errors import NotFound, TransientIO, ValidationError
from raseed.services.image_loader import HttpImageLoader, resolve_mime_type


def loader_returning(status_code=200, content=b"\x89PNG-bytes", headers=None):
    def handler(request):
        return httpx.Response(status_code, content=content, headers=headers or {})

    return HttpImageLoader(timeout_seconds=5, transport=httpx.MockTransport(handler))


class TestResolveMimeType:

    def test_header_wins(self):
        assert resolve_mime_type("https://x/r1.jpg", "image/png; charset=binary") == "image/png"

    def test_falls_back_to_extension(self):
        assert resolve_mime_type("https://x/r1.webp", "application/octet-stream") == "image/webp"

    def test_defaults_to_jpeg(self):
        assert resolve_mime_type("https://x/r1", None) == "image/jpeg"


class TestHttpImageLoader:

    @pytest.mark.asyncio
    async def test_downloads_bytes(self):
        loader = loader_returning(headers={"content-type": "image/png"})

        image = await loader.load("https://storage.example.com/r1.png")

        assert image.data == b"\x89PNG-bytes"
        assert image.mime_type == "image/png"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [404, 410])
    async def test_missing_image_is_not_found(self, status_code):
        with pytest.raises(NotFound):
            await loader_returning(status_code).load("https://storage.example.com/r1.jpg")

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self):
        with pytest.raises(TransientIO):
            await loader_returning(503).load("https://storage.example.com/r1.jpg")

    @pytest.mark.asyncio
    async def test_forbidden_is_validation_error(self):
        with pytest.raises(ValidationError):
            await loader_returning(403).load("https://storage.example.com/r1.jpg")

    @pytest.mark.asyncio
    async def test_connection_failure_is_transient(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        loader = HttpImageLoader(transport=httpx.MockTransport(handler))

        with pytest.raises(TransientIO):
            await loader.load("https://storage.example.com/r1.jpg")

    @pytest.mark.asyncio
    async def test_unsupported_scheme_is_validation_error(self):
        with pytest.raises(ValidationError):
            await HttpImageLoader().load("ftp://storage.example.com/r1.jpg")
