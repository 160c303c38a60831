"""xAI Grok image generation."""

from __future__ import annotations

import logging

from model_council.config import DEFAULT_BASE_URLS
from model_council.http import join_url, post
from model_council.image.base import BaseImageProvider, image_from_item
from model_council.image.sizes import resolve_size
from model_council.models import ImageRequest, ImageResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "grok-2-image-latest"
MAX_PROMPT_CHARS = 1000
MODERATION_MARKERS = ("content moderation", "moderation_blocked", "content_policy_violation")


def truncate_prompt(prompt: str, limit: int = MAX_PROMPT_CHARS) -> tuple[str, bool]:
    """Cut ``prompt`` to its first ``limit`` characters.

    Returns the prompt to send and whether it was shortened.
    """
    if len(prompt) <= limit:
        return prompt, False
    return prompt[:limit], True


class XAIImageProvider(BaseImageProvider):
    """Text-to-image only. Prompts over ``MAX_PROMPT_CHARS`` are truncated, not rejected,
    and every result is flagged with ``prompt_truncated``.
    """

    name = "xAI"
    vendor = "xai"
    supports_reference_images = False

    async def _generate(self, request: ImageRequest, api_key: str) -> list[ImageResult]:
        base_url = (request.credentials.base_url or DEFAULT_BASE_URLS["xai"]).rstrip("/")
        model_id = request.model_id or DEFAULT_MODEL

        prompt, truncated = truncate_prompt(request.prompt)
        if truncated:
            logger.warning(
                f"[xAI] Prompt truncated from {len(request.prompt)} to {MAX_PROMPT_CHARS} characters"
            )

        body = {"model": model_id, "prompt": prompt, "n": request.count, "response_format": "b64_json"}
        aspect_ratio = resolve_size(self.vendor, model_id, request.aspect_ratio)
        if aspect_ratio:
            body["aspect_ratio"] = aspect_ratio

        data = await post(
            self.name,
            join_url(base_url, "images/generations"),
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json_body=body,
            timeout=self.timeout,
            transport=self.transport,
            moderation_markers=MODERATION_MARKERS,
        )
        results = [image_from_item(item, prompt_truncated=truncated) for item in data.get("data") or []]
        return [result for result in results if result is not None]
