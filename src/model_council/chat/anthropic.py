"""Anthropic Claude chat adapter built on the official SDK."""

from __future__ import annotations

import logging
from typing import Literal

import httpx

from model_council import usage
from model_council.attachments.codec import decode_text, is_image_like, is_text_like, wrap_text_file
from model_council.chat.base import BaseChatProvider
from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ModerationError, ProtocolError, VendorError
from model_council.http import extract_error_message, transport_error
from model_council.models import Attachment, GenerateRequest, GenerateResult, Message

logger = logging.getLogger(__name__)

MAX_TOKENS = 4096

LeadingTurnPolicy = Literal["drop", "error"]


def _attachment_block(attachment: Attachment) -> dict:
    if is_image_like(attachment.mime_type):
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": attachment.mime_type, "data": attachment.data},
        }
    if is_text_like(attachment.mime_type):
        content = decode_text(attachment.data)
        return {"type": "text", "text": f"\n{wrap_text_file(attachment.name, content)}\n"}
    logger.warning(f"[Anthropic] Unsupported attachment type: {attachment.mime_type}")
    return {"type": "text", "text": f"[Unsupported file attachment: {attachment.name} ({attachment.mime_type})]"}


def normalize_messages(
    history: list[Message],
    new_message: str,
    attachment: Attachment | None = None,
    leading_turn_policy: LeadingTurnPolicy = "drop",
) -> list[dict]:
    """Convert history + new message into Anthropic's alternating turns.

    The API requires strictly alternating ``user``/``assistant`` roles
    starting with ``user``. Adjacent same-role messages (including the
    trailing user turn built from ``new_message``) are merged by
    concatenating their content blocks in order; messages with no content
    are skipped. A leading assistant turn left after merging is dropped, or
    rejected with ``ProtocolError`` when ``leading_turn_policy="error"``.

    Pure and deterministic: identical input gives identical output.
    """
    inputs = [(msg.role, msg.text, msg.attachment) for msg in history]
    inputs.append(("user", new_message, attachment))

    normalized: list[dict] = []
    for role, text, attach in inputs:
        api_role = "assistant" if role == "model" else "user"
        blocks = []
        if attach is not None:
            blocks.append(_attachment_block(attach))
        if text and text.strip():
            blocks.append({"type": "text", "text": text})
        if not blocks:
            continue

        if normalized and normalized[-1]["role"] == api_role:
            normalized[-1]["content"].extend(blocks)
        else:
            normalized.append({"role": api_role, "content": blocks})

    if normalized and normalized[0]["role"] != "user":
        if leading_turn_policy == "error":
            raise ProtocolError(
                "Conversation starts with an assistant turn, which Anthropic does not accept",
                provider=AnthropicChatProvider.name,
            )
        logger.warning("[Anthropic] Removing leading non-user message (API requirement)")
        normalized.pop(0)

    return normalized


def _sdk_base_url(base_url: str) -> str:
    """The SDK appends ``/v1/messages`` itself, so strip a trailing ``/v1``."""
    base_url = base_url.rstrip("/")
    if base_url.endswith("/v1"):
        base_url = base_url[: -len("/v1")]
    return base_url


class AnthropicChatProvider(BaseChatProvider):
    """Claude models via the Messages API."""

    name = "Anthropic"

    def __init__(
        self,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
        leading_turn_policy: LeadingTurnPolicy = "drop",
    ):
        super().__init__(timeout=timeout, transport=transport)
        try:
            import anthropic  # noqa: F401
        except ImportError:
            raise ImportError(
                "anthropic is required for AnthropicChatProvider. "
                "Install with: pip install model-council[anthropic]"
            )
        self.leading_turn_policy = leading_turn_policy

    async def generate(self, request: GenerateRequest) -> GenerateResult:
        from anthropic import APIConnectionError, APIError, APIStatusError, AsyncAnthropic

        api_key = self._require_api_key(request)
        messages = normalize_messages(
            request.history, request.new_message, request.attachment, self.leading_turn_policy
        )
        if not messages:
            raise ProtocolError("Cannot send empty conversation to Claude.", provider=self.name)

        base_url = _sdk_base_url(self._base_url(request, DEFAULT_BASE_URLS["anthropic"]))
        kwargs = {"model": request.model.id, "max_tokens": MAX_TOKENS, "messages": messages}
        if request.system_instruction:
            kwargs["system"] = request.system_instruction

        logger.info(f"[Anthropic] Model: {request.model.id}, turns: {len(messages)}")
        http_client = httpx.AsyncClient(transport=self.transport, timeout=self.timeout) if self.transport else None
        try:
            async with AsyncAnthropic(
                api_key=api_key,
                base_url=base_url,
                max_retries=0,
                timeout=self.timeout,
                http_client=http_client,
            ) as client:
                response = await client.messages.create(**kwargs)
        except APIStatusError as e:
            raise self._vendor_error(e) from e
        except APIConnectionError as e:
            logger.error(f"[Anthropic] Request failed: {e}")
            raise transport_error(self.name, base_url, e) from e
        except APIError as e:
            raise ProtocolError(f"Anthropic returned an unusable response: {e}", provider=self.name) from e

        text = "\n".join(block.text for block in response.content if block.type == "text" and block.text)
        if not text.strip():
            if response.stop_reason == "refusal":
                raise ModerationError("Claude declined to respond (refusal)", provider=self.name, status_code=200)
            raise ProtocolError("No text response received from Claude.", provider=self.name, status_code=200)

        logger.info(f"[Anthropic] Response received: {len(text)} chars")
        return GenerateResult(text=text, usage=usage.from_anthropic(response.usage))

    def _vendor_error(self, e) -> VendorError:
        raw = e.response.text if e.response is not None else ""
        vendor_message = None
        if isinstance(e.body, dict):
            error = e.body.get("error")
            if isinstance(error, dict):
                vendor_message = error.get("message")
        vendor_message = vendor_message or extract_error_message(raw) or raw or str(e)
        logger.error(f"[Anthropic] API Error ({e.status_code}): {raw[:500]}")
        return VendorError(
            f"Anthropic API error ({e.status_code}): {vendor_message}",
            provider=self.name,
            status_code=e.status_code,
            body=raw,
        )
