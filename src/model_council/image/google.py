"""Google Gemini image generation (generateContent with image output)."""

from __future__ import annotations

import logging

from model_council.attachments.codec import to_data_uri
from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ModerationError
from model_council.http import join_url, post
from model_council.image.base import BaseImageProvider
from model_council.image.sizes import resolve_size
from model_council.models import ImageRequest, ImageResult

logger = logging.getLogger(__name__)

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_CIVIC_INTEGRITY",
)
_BLOCKED_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "IMAGE_SAFETY"}


class GoogleImageProvider(BaseImageProvider):
    """Reference images are sent as ``inline_data`` parts after the prompt (edit path)."""

    name = "Google"
    vendor = "google"

    async def _generate(self, request: ImageRequest, api_key: str) -> list[ImageResult]:
        base_url = (request.credentials.base_url or DEFAULT_BASE_URLS["google"]).rstrip("/")
        url = join_url(base_url, f"models/{request.model_id}:generateContent")

        parts: list[dict] = [{"text": request.prompt}]
        for image in request.reference_images:
            parts.append({"inline_data": {"mime_type": image.mime_type, "data": image.data}})

        generation_config: dict = {"responseModalities": ["TEXT", "IMAGE"], "candidateCount": 1}
        aspect_ratio = resolve_size(self.vendor, request.model_id, request.aspect_ratio)
        if aspect_ratio:
            generation_config["imageConfig"] = {"aspectRatio": aspect_ratio}

        body = {
            "contents": [{"role": "user", "parts": parts}],
            "safetySettings": [{"category": c, "threshold": "BLOCK_NONE"} for c in SAFETY_CATEGORIES],
            "generationConfig": generation_config,
        }
        data = await post(
            self.name,
            url,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            json_body=body,
            timeout=self.timeout,
            transport=self.transport,
        )
        return self._parse(data)

    def _parse(self, data: dict) -> list[ImageResult]:
        results = []
        finish_reasons = []
        for candidate in data.get("candidates") or []:
            finish_reasons.append(candidate.get("finishReason"))
            for part in (candidate.get("content") or {}).get("parts") or []:
                inline = part.get("inlineData") or part.get("inline_data")
                if not inline or not inline.get("data"):
                    continue
                mime = inline.get("mimeType") or inline.get("mime_type") or "image/jpeg"
                results.append(ImageResult(url=to_data_uri(mime, inline["data"]), mime_type=mime))

        if results:
            return results

        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ModerationError(f"Google Blocked: {block_reason}", provider=self.name, status_code=200)
        blocked = [reason for reason in finish_reasons if reason in _BLOCKED_FINISH_REASONS]
        if blocked:
            raise ModerationError(f"Google Blocked: {blocked[0]}", provider=self.name, status_code=200)
        logger.debug(f"[Google] No image data in response: {str(data)[:500]}")
        return results
