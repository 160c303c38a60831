"""OpenRouter image generation over the chat-completions endpoint.

OpenRouter has no ``/images/generations``; image models answer a chat
completion, and where the image ends up in the payload varies by model. The
response is recovered by trying ``RESPONSE_STRATEGIES`` in order, with a
plain URL in the reply text as the last resort.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from model_council.attachments.codec import to_data_uri
from model_council.chat.openai import OPENROUTER_HEADERS, extract_text
from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ConfigurationError, ProtocolError
from model_council.http import join_url, post
from model_council.image.base import DEFAULT_IMAGE_MIME, BaseImageProvider, guess_mime
from model_council.image.sizes import resolve_size
from model_council.models import ImageRequest, ImageResult

logger = logging.getLogger(__name__)

_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
_TEXT_URL = re.compile(r"\(?(https?://[^\s)<>\"]+)")

Strategy = Callable[[dict], "list[ImageResult] | None"]


def from_markdown_link(data: dict) -> list[ImageResult] | None:
    """``![alt](url)`` embedded in the message text."""
    content = extract_text(data)
    urls = _MARKDOWN_IMAGE.findall(content)
    if not urls:
        return None
    return [ImageResult(url=url, mime_type=guess_mime(url), revised_prompt=content) for url in urls]


def from_message_images(data: dict) -> list[ImageResult] | None:
    """``choices[0].message.images[*]`` with ``image_url.url`` or ``url``."""
    choices = data.get("choices") or []
    if not choices:
        return None
    results = []
    for image in (choices[0].get("message") or {}).get("images") or []:
        if not isinstance(image, dict):
            continue
        url = (image.get("image_url") or {}).get("url") or image.get("url")
        if url:
            results.append(ImageResult(url=url, mime_type=guess_mime(url)))
    return results or None


def from_data_array(data: dict) -> list[ImageResult] | None:
    """Root-level ``data[*]`` with ``url`` or ``b64_json``."""
    results = []
    for item in data.get("data") or []:
        if not isinstance(item, dict):
            continue
        if item.get("b64_json"):
            results.append(ImageResult(url=to_data_uri(DEFAULT_IMAGE_MIME, item["b64_json"])))
        elif item.get("url"):
            results.append(ImageResult(url=item["url"], mime_type=guess_mime(item["url"])))
    return results or None


def from_text_url(data: dict) -> list[ImageResult] | None:
    """First plain ``http(s)`` URL in the message text, parenthesized or bare."""
    content = extract_text(data)
    match = _TEXT_URL.search(content)
    if not match:
        return None
    url = match.group(1)
    return [ImageResult(url=url, mime_type=guess_mime(url), revised_prompt=content)]


# Priority order matters: the first strategy that matches wins.
RESPONSE_STRATEGIES: list[tuple[str, Strategy]] = [
    ("markdown_link", from_markdown_link),
    ("message_images", from_message_images),
    ("data_array", from_data_array),
    ("text_url", from_text_url),
]


def recover_images(data: dict, strategies: list[tuple[str, Strategy]] | None = None) -> tuple[str, list[ImageResult]]:
    """Run the strategies in order and return ``(strategy_name, results)``."""
    for name, strategy in strategies or RESPONSE_STRATEGIES:
        results = strategy(data)
        if results:
            logger.debug(f"[OpenRouter] Image recovered with strategy {name}")
            return name, results
    content = extract_text(data)
    raise ProtocolError(
        f"No image found in OpenRouter response. Content: {content[:100]}",
        provider="OpenRouter",
        status_code=200,
    )


class OpenRouterImageProvider(BaseImageProvider):
    name = "OpenRouter"
    vendor = "openrouter"

    async def _generate(self, request: ImageRequest, api_key: str) -> list[ImageResult]:
        if not request.model_id:
            raise ConfigurationError("No OpenRouter image model selected", provider=self.name)
        base_url = (request.credentials.base_url or DEFAULT_BASE_URLS["openrouter"]).rstrip("/")

        if request.reference_images:
            content: str | list[dict] = [{"type": "text", "text": request.prompt}]
            for image in request.reference_images:
                content.append({"type": "image_url", "image_url": {"url": image.data_uri}})
        else:
            content = request.prompt

        body: dict = {
            "model": request.model_id,
            "messages": [{"role": "user", "content": content}],
            "modalities": ["image", "text"],
        }
        aspect_ratio = resolve_size(self.vendor, request.model_id, request.aspect_ratio)
        if aspect_ratio:
            body["image_config"] = {"aspect_ratio": aspect_ratio}

        data = await post(
            self.name,
            join_url(base_url, "chat/completions"),
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json", **OPENROUTER_HEADERS},
            json_body=body,
            timeout=self.timeout,
            transport=self.transport,
        )
        _, results = recover_images(data)
        return results
