"""Tests for the OpenAI-compatible chat adapter."""

import asyncio
import base64
import json

import httpx
import pytest

from model_council.chat.openai import OpenAIChatProvider, build_messages
from model_council.exceptions import ConfigurationError, ProtocolError, VendorError
from model_council.models import Attachment, Credentials, GenerateRequest, Message, ModelDescriptor


def _text_attachment(content="a,b\n1,2", name="data.csv", mime="text/csv"):
    return Attachment(mime_type=mime, data=base64.b64encode(content.encode()).decode(), name=name)


def _request(model_id="gpt-4o", provider="openai", api_key="sk-test", **kwargs):
    return GenerateRequest(
        model=ModelDescriptor(id=model_id, name=model_id, provider=provider),
        history=kwargs.pop("history", []),
        new_message=kwargs.pop("new_message", "Hello"),
        credentials=Credentials(api_key=api_key, base_url="https://llm.test/v1/"),
        **kwargs,
    )


def _ok(content="Hi!"):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }


def test_system_instruction_becomes_system_turn():
    messages = build_messages("gpt-4o", [], "Hi", system_instruction="Be brief")
    assert messages[0] == {"role": "system", "content": "Be brief"}
    assert messages[1] == {"role": "user", "content": "Hi"}


def test_system_instruction_folded_for_o1():
    history = [Message(role="user", text="earlier"), Message(role="model", text="reply")]
    messages = build_messages("o1-mini", history, "Hi", system_instruction="Be brief")
    assert all(m["role"] != "system" for m in messages)
    assert messages[0]["content"] == "System Instruction: Be brief\n\nearlier"
    assert messages[1] == {"role": "assistant", "content": "reply"}


def test_text_attachment_is_inlined_verbatim_between_markers():
    content = "name,value\nalpha,1\nbeta,2"
    messages = build_messages("gpt-4o", [], "Summarize", _text_attachment(content))
    text = messages[-1]["content"][0]["text"]
    assert text.startswith("Summarize")
    assert f"--- Attached File: data.csv ---\n{content}\n--- End File ---" in text


def test_image_attachment_becomes_data_uri_block():
    image = Attachment(mime_type="image/png", data="iVBORw0K", name="shot.png")
    messages = build_messages("gpt-4o", [], "What is this?", image)
    blocks = messages[-1]["content"]
    assert blocks[0] == {"type": "text", "text": "What is this?"}
    assert blocks[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0K"}}


def test_unsupported_attachment_gets_note():
    pdf = Attachment(mime_type="application/pdf", data="JVBERi0=", name="doc.pdf")
    messages = build_messages("gpt-4o", [], "Read this", pdf)
    text = messages[-1]["content"][0]["text"]
    assert "doc.pdf" in text
    assert "could not be processed" in text


def test_generate_success():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_ok())

    provider = OpenAIChatProvider(transport=httpx.MockTransport(handler))
    result = asyncio.run(provider.generate(_request()))

    assert result.text == "Hi!"
    assert result.usage.total_tokens == 15
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o"
    assert seen["body"]["stream"] is False


def test_openrouter_family_sends_attribution_headers():
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        return httpx.Response(200, json=_ok())

    provider = OpenAIChatProvider(transport=httpx.MockTransport(handler))
    asyncio.run(provider.generate(_request(model_id="meta/llama", provider="openrouter")))
    assert "X-Title" in seen["headers"]


def test_missing_key_is_configuration_error():
    provider = OpenAIChatProvider(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    with pytest.raises(ConfigurationError):
        asyncio.run(provider.generate(_request(api_key="  ")))


def test_vendor_error_prefers_error_message():
    def handler(request):
        return httpx.Response(401, json={"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}})

    provider = OpenAIChatProvider(transport=httpx.MockTransport(handler))
    with pytest.raises(VendorError, match="Incorrect API key provided") as exc_info:
        asyncio.run(provider.generate(_request()))
    assert exc_info.value.status_code == 401


def test_vendor_error_falls_back_to_raw_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway from proxy")

    provider = OpenAIChatProvider(transport=httpx.MockTransport(handler))
    with pytest.raises(VendorError, match="Bad Gateway from proxy"):
        asyncio.run(provider.generate(_request(provider="xai")))


def test_empty_content_is_protocol_error():
    provider = OpenAIChatProvider(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=_ok(content=""))))
    with pytest.raises(ProtocolError):
        asyncio.run(provider.generate(_request()))
