"""
Receipt image loader.

The receipt pipeline receives an image URL on the event and sends the image
bytes to the model, so the image is downloaded first.
"""

import logging
import mimetypes
from typing import Optional, Protocol

import httpx

from raseed.agents.extraction.adapter import ImagePayload
from raseed.errors import NotFound, TransientIO, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp", "image/heic"}


class ImageLoader(Protocol):
    """Fetches an image referenced by URL."""

    async def load(self, image_url: str) -> ImagePayload:
        ...


def resolve_mime_type(image_url: str, content_type: Optional[str]) -> str:
    """
    Pick the MIME type from the response header, falling back to the URL.

    Defaults to image/jpeg when neither is conclusive.
    """
    if content_type:
        mime_type = content_type.split(";", 1)[0].strip().lower()
        if mime_type in SUPPORTED_IMAGE_TYPES:
            return mime_type

    guessed, _ = mimetypes.guess_type(image_url)
    if guessed in SUPPORTED_IMAGE_TYPES:
        return guessed
    return "image/jpeg"


class HttpImageLoader:
    """ImageLoader that downloads over HTTP(S) with a bounded timeout."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def load(self, image_url: str) -> ImagePayload:
        """
        Download the image at `image_url`.

        Raises:
            NotFound: The image does not exist (404/410).
            ValidationError: Any other 4xx, or a malformed URL.
            TransientIO: Network failure, timeout or 5xx.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(image_url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ValidationError(f"Invalid image URL: {e}") from e
        except httpx.HTTPError as e:
            raise TransientIO(f"Image download failed: {type(e).__name__}: {e}") from e

        if response.status_code in (404, 410):
            raise NotFound("receipt_images", image_url)
        if response.status_code >= 500:
            raise TransientIO(f"Image host returned {response.status_code}")
        if response.status_code >= 400:
            raise ValidationError(f"Image host refused the download ({response.status_code})")

        mime_type = resolve_mime_type(image_url, response.headers.get("content-type"))
        logger.debug(f"Downloaded receipt image ({len(response.content)} bytes, {mime_type})")

        return ImagePayload(data=response.content, mime_type=mime_type)
