"""OpenAI-compatible chat adapter (OpenAI, xAI, OpenRouter, local servers)."""

from __future__ import annotations

import logging

from model_council import usage
from model_council.attachments.codec import decode_text, is_image_like, is_text_like, wrap_text_file
from model_council.chat.base import BaseChatProvider
from model_council.config import DEFAULT_BASE_URLS
from model_council.exceptions import ProtocolError
from model_council.http import join_url, post
from model_council.models import Attachment, GenerateRequest, GenerateResult, Message

logger = logging.getLogger(__name__)

# Model families that ignore or reject the ``system`` role.
NO_SYSTEM_ROLE_PREFIXES: tuple[str, ...] = ("o1",)

SYSTEM_LABEL = "System Instruction: "

OPENROUTER_HEADERS = {
    "HTTP-Referer": "https://github.com/model-council/model-council",
    "X-Title": "Model Council",
}


def _content(text: str, attachment: Attachment | None) -> str | list[dict]:
    """Text as a plain string, or a block list when an attachment is present."""
    if attachment is None:
        return text

    if is_text_like(attachment.mime_type):
        file_text = wrap_text_file(attachment.name, decode_text(attachment.data))
        return [{"type": "text", "text": f"{text}\n\n{file_text}"}]

    blocks: list[dict] = [{"type": "text", "text": text}]
    if is_image_like(attachment.mime_type):
        blocks.append({"type": "image_url", "image_url": {"url": attachment.data_uri}})
    else:
        logger.warning(f"[OpenAI] Unsupported attachment type: {attachment.mime_type}")
        blocks[0]["text"] = (
            f"{text}\n\n[Attached file {attachment.name} ({attachment.mime_type}) "
            "could not be processed: unsupported format]"
        )
    return blocks


def build_messages(
    model_id: str,
    history: list[Message],
    new_message: str,
    attachment: Attachment | None = None,
    system_instruction: str | None = None,
) -> list[dict]:
    messages: list[dict] = []
    fold_system = bool(system_instruction) and model_id.startswith(NO_SYSTEM_ROLE_PREFIXES)
    if system_instruction and not fold_system:
        messages.append({"role": "system", "content": system_instruction})

    for msg in history:
        role = "assistant" if msg.role == "model" else "user"
        messages.append({"role": role, "content": _content(msg.text, msg.attachment)})
    messages.append({"role": "user", "content": _content(new_message, attachment)})

    if fold_system:
        _prepend_to_first_user_turn(messages, f"{SYSTEM_LABEL}{system_instruction}")
    return messages


def _prepend_to_first_user_turn(messages: list[dict], prefix: str) -> None:
    for message in messages:
        if message["role"] != "user":
            continue
        content = message["content"]
        if isinstance(content, str):
            message["content"] = f"{prefix}\n\n{content}"
        else:
            content[0]["text"] = f"{prefix}\n\n{content[0]['text']}"
        return


def extract_text(data: dict) -> str:
    """Text of ``choices[0].message.content`` (string or list of text parts)."""
    choices = data.get("choices") or []
    if not choices:
        return ""
    content = (choices[0].get("message") or {}).get("content")
    if isinstance(content, list):
        return "".join(part.get("text", "") for part in content if isinstance(part, dict))
    return content or ""


class OpenAIChatProvider(BaseChatProvider):
    """Chat completions over ``POST {base}/chat/completions`` with bearer auth."""

    name = "OpenAI"

    async def generate(self, request: GenerateRequest) -> GenerateResult:
        api_key = self._require_api_key(request)
        family = request.model.provider
        provider_name = self._provider_name(family)
        base_url = self._base_url(request, DEFAULT_BASE_URLS.get(family, DEFAULT_BASE_URLS["openai"]))
        url = join_url(base_url, "chat/completions")

        messages = build_messages(
            request.model.id,
            request.history,
            request.new_message,
            request.attachment,
            request.system_instruction,
        )
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        if family == "openrouter":
            headers.update(OPENROUTER_HEADERS)

        logger.info(f"[{provider_name}] Model: {request.model.id}, turns: {len(messages)}")
        data = await post(
            provider_name,
            url,
            headers=headers,
            json_body={"model": request.model.id, "messages": messages, "stream": False},
            timeout=self.timeout,
            transport=self.transport,
        )

        text = extract_text(data)
        if not text.strip():
            raise ProtocolError(f"No response content from {provider_name}", provider=provider_name, status_code=200)
        return GenerateResult(text=text, usage=usage.from_openai(data))

    @staticmethod
    def _provider_name(family: str) -> str:
        return {"xai": "xAI", "openrouter": "OpenRouter"}.get(family, "OpenAI")
