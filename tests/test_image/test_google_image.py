"""Tests for the Google image adapter."""

import asyncio
import json

import httpx
import pytest

from model_council.exceptions import ModerationError, ProtocolError
from model_council.image.google import GoogleImageProvider
from model_council.models import Attachment, Credentials, ImageRequest, ModelDescriptor

MODEL = ModelDescriptor(id="gemini-2.5-flash-image", name="Nano Banana", provider="google", capabilities=("image",))


def _request(**kwargs):
    return ImageRequest(
        model=MODEL,
        prompt="a paper crane",
        credentials=Credentials(api_key="g-key", base_url="https://google.test/v1beta"),
        **kwargs,
    )


def _provider(payload, seen=None):
    def handler(request):
        if seen is not None:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=payload)

    return GoogleImageProvider(transport=httpx.MockTransport(handler))


def test_inline_image_parts_become_data_uris():
    seen = {}
    payload = {
        "candidates": [{
            "content": {"parts": [
                {"text": "Here is your crane."},
                {"inlineData": {"mimeType": "image/png", "data": "Q1JBTkU="}},
            ]},
            "finishReason": "STOP",
        }]
    }
    reference = Attachment(mime_type="image/jpeg", data="UkVG", name="ref.jpg")
    results = asyncio.run(_provider(payload, seen).generate_images(_request(aspect_ratio="16:9", reference_images=[reference])))

    assert seen["url"] == "https://google.test/v1beta/models/gemini-2.5-flash-image:generateContent"
    assert seen["key"] == "g-key"
    parts = seen["body"]["contents"][0]["parts"]
    assert parts[0] == {"text": "a paper crane"}
    assert parts[1] == {"inline_data": {"mime_type": "image/jpeg", "data": "UkVG"}}
    assert seen["body"]["generationConfig"]["responseModalities"] == ["TEXT", "IMAGE"]
    assert seen["body"]["generationConfig"]["imageConfig"] == {"aspectRatio": "16:9"}
    assert len(results) == 1
    assert results[0].url == "data:image/png;base64,Q1JBTkU="


def test_prompt_block_raises_moderation_error():
    payload = {"promptFeedback": {"blockReason": "PROHIBITED_CONTENT"}}
    with pytest.raises(ModerationError, match="Google Blocked: PROHIBITED_CONTENT"):
        asyncio.run(_provider(payload).generate_images(_request()))


def test_safety_finish_reason_raises_moderation_error():
    payload = {"candidates": [{"content": {"parts": []}, "finishReason": "IMAGE_SAFETY"}]}
    with pytest.raises(ModerationError, match="IMAGE_SAFETY"):
        asyncio.run(_provider(payload).generate_images(_request()))


def test_text_only_response_is_protocol_error():
    payload = {"candidates": [{"content": {"parts": [{"text": "I can only describe it."}]}, "finishReason": "STOP"}]}
    with pytest.raises(ProtocolError, match="No image data"):
        asyncio.run(_provider(payload).generate_images(_request()))
