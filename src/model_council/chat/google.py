"""Google Gemini chat adapter (REST generateContent)."""

from __future__ import annotations

import logging

from model_council import usage
from model_council.chat.base import BaseChatProvider
from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ModerationError, ProtocolError
from model_council.http import join_url, post
from model_council.models import Attachment, GenerateRequest, GenerateResult, Message

logger = logging.getLogger(__name__)

EMPTY_TURN_PLACEHOLDER = "..."
EMPTY_MESSAGE_PLACEHOLDER = " "
_SAFETY_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"}


def _parts(text: str, attachment: Attachment | None) -> list[dict]:
    parts: list[dict] = []
    if attachment and attachment.mime_type:
        parts.append({"inlineData": {"mimeType": attachment.mime_type, "data": attachment.data}})
    if text and text.strip():
        parts.append({"text": text})
    return parts


def build_contents(history: list[Message], new_message: str, attachment: Attachment | None = None) -> list[dict]:
    """Map history + new message to Gemini ``contents``.

    Each turn lists its inline attachment part first, then its text part.
    Turns with no content get a placeholder because the API rejects empty
    ``parts``.
    """
    contents = []
    for msg in history:
        parts = _parts(msg.text, msg.attachment) or [{"text": EMPTY_TURN_PLACEHOLDER}]
        contents.append({"role": "user" if msg.role == "user" else "model", "parts": parts})
    new_parts = _parts(new_message, attachment) or [{"text": EMPTY_MESSAGE_PLACEHOLDER}]
    contents.append({"role": "user", "parts": new_parts})
    return contents


class GoogleChatProvider(BaseChatProvider):
    """Gemini models via ``POST {base}/models/{id}:generateContent``."""

    name = "Google"

    async def generate(self, request: GenerateRequest) -> GenerateResult:
        api_key = self._require_api_key(request)
        base_url = self._base_url(request, DEFAULT_BASE_URLS["google"])
        url = join_url(base_url, f"models/{request.model.id}:generateContent")

        body: dict = {"contents": build_contents(request.history, request.new_message, request.attachment)}
        if request.system_instruction:
            body["systemInstruction"] = {"parts": [{"text": request.system_instruction}]}

        logger.info(f"[Google] Model: {request.model.id}, turns: {len(body['contents'])}")
        data = await post(
            self.name,
            url,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
            json_body=body,
            timeout=self.timeout,
            transport=self.transport,
        )
        return GenerateResult(text=self._extract_text(data), usage=usage.from_google(data))

    def _extract_text(self, data: dict) -> str:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ModerationError(f"Google blocked the prompt: {block_reason}", provider=self.name, status_code=200)

        candidates = data.get("candidates") or []
        if not candidates:
            raise ProtocolError("No candidates returned from Gemini", provider=self.name, status_code=200)

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts if not part.get("thought"))
        if text.strip():
            return text

        finish_reason = candidate.get("finishReason")
        if finish_reason in _SAFETY_FINISH_REASONS:
            raise ModerationError(f"Google blocked the response: {finish_reason}", provider=self.name, status_code=200)
        raise ProtocolError("No text returned from Gemini", provider=self.name, status_code=200)
