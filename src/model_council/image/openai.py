"""OpenAI image generation: JSON ``/images/generations``, multipart ``/images/edits``."""

from __future__ import annotations

import binascii
import logging

from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ConfigurationError
from model_council.http import join_url, post
from model_council.image.base import BaseImageProvider, image_from_item
from model_council.image.sizes import resolve_size
from model_council.models import ImageRequest, ImageResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-image-1"
MODERATION_MARKERS = ("moderation_blocked", "content_policy_violation")


class OpenAIImageProvider(BaseImageProvider):
    name = "OpenAI"
    vendor = "openai"

    async def _generate(self, request: ImageRequest, api_key: str) -> list[ImageResult]:
        base_url = (request.credentials.base_url or DEFAULT_BASE_URLS["openai"]).rstrip("/")
        model_id = request.model_id or DEFAULT_MODEL
        size = resolve_size(self.vendor, model_id, request.aspect_ratio)
        headers = {"Authorization": f"Bearer {api_key}"}

        if request.reference_images:
            # Edits take the first reference image; httpx sets the multipart boundary.
            reference = request.reference_images[0]
            try:
                payload = reference.payload
            except binascii.Error as e:
                raise ConfigurationError(
                    f"Reference image {reference.name or '(unnamed)'} is not valid base64: {e}",
                    provider=self.name,
                ) from e
            fields = {"model": model_id, "prompt": request.prompt, "n": str(request.count)}
            if size:
                fields["size"] = size
            logger.info(f"[OpenAI] Requesting edit ({model_id})")
            data = await post(
                self.name,
                join_url(base_url, "images/edits"),
                headers=headers,
                data=fields,
                files=[("image", (reference.name or "image.png", payload, reference.mime_type))],
                timeout=self.timeout,
                transport=self.transport,
                moderation_markers=MODERATION_MARKERS,
            )
        else:
            body = {"model": model_id, "prompt": request.prompt, "n": request.count}
            if size:
                body["size"] = size
            if "gpt-image" in model_id:
                body["moderation"] = "low"
            logger.info(f"[OpenAI] Requesting generation ({model_id})")
            data = await post(
                self.name,
                join_url(base_url, "images/generations"),
                headers={**headers, "Content-Type": "application/json"},
                json_body=body,
                timeout=self.timeout,
                transport=self.transport,
                moderation_markers=MODERATION_MARKERS,
            )

        results = [image_from_item(item, size) for item in data.get("data") or []]
        return [result for result in results if result is not None]
