"""Abstract base class for image/video generation adapters."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from abc import ABC, abstractmethod
from urllib.parse import urlparse

import httpx

from model_council.attachments.codec import parse_data_uri, to_data_uri
from model_council.exceptions import CapabilityError, ConfigurationError, ProtocolError
from model_council.image.sizes import dimensions
from model_council.models import ImageRequest, ImageResult

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


def guess_mime(url: str, default: str = DEFAULT_IMAGE_MIME) -> str:
    """MIME type of a data URI or remote URL."""
    parsed = parse_data_uri(url)
    if parsed:
        return parsed[0]
    guessed, _ = mimetypes.guess_type(urlparse(url).path)
    return guessed or default


def image_from_item(item: dict, size: str | None = None, prompt_truncated: bool = False) -> ImageResult | None:
    """Build a result from an OpenAI-style ``data[]`` entry (``b64_json`` or ``url``)."""
    dims = dimensions(size)
    if item.get("b64_json"):
        url = to_data_uri(DEFAULT_IMAGE_MIME, item["b64_json"])
    elif item.get("url"):
        url = item["url"]
    else:
        return None
    return ImageResult(
        url=url,
        mime_type=guess_mime(url),
        width=dims[0] if dims else None,
        height=dims[1] if dims else None,
        seed=item.get("seed"),
        revised_prompt=item.get("revised_prompt"),
        prompt_truncated=prompt_truncated,
    )


class BaseImageProvider(ABC):
    """Uniform ``generate_images`` contract over one vendor.

    Subclasses declare what they can do; requests needing a missing
    capability fail with ``CapabilityError`` before any network call.
    """

    name: str = "provider"
    vendor: str = ""
    supports_reference_images: bool = True
    supports_video: bool = False

    def __init__(self, timeout: float = 120.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    async def generate_images(self, request: ImageRequest) -> list[ImageResult]:
        api_key = request.credentials.api_key
        if not api_key or not api_key.strip():
            raise ConfigurationError(f"Missing API key for {self.name}", provider=self.name)
        self._check_capabilities(request)

        logger.info(f"[{self.name}] Requesting {request.count} image(s) from {request.model_id}")
        results = await self._generate(request, api_key)
        if not results:
            raise ProtocolError(f"No image data found in {self.name} response", provider=self.name, status_code=200)
        return results

    def generate_images_sync(self, request: ImageRequest) -> list[ImageResult]:
        return asyncio.run(self.generate_images(request))

    def _check_capabilities(self, request: ImageRequest) -> None:
        if request.video and not self.supports_video:
            raise CapabilityError(
                f"Video generation is not currently supported by the {self.name} provider.",
                provider=self.name,
            )
        if request.reference_images and not self.supports_reference_images:
            raise CapabilityError(
                f"Image input / variations are not currently supported by the {self.name} provider.",
                provider=self.name,
            )

    @abstractmethod
    async def _generate(self, request: ImageRequest, api_key: str) -> list[ImageResult]:
        ...
