"""Select a chat adapter by provider family."""

from __future__ import annotations

import httpx

from model_council.chat.base import BaseChatProvider
from model_council.exceptions import ConfigurationError


def _google(**kwargs) -> BaseChatProvider:
    from model_council.chat.google import GoogleChatProvider
    return GoogleChatProvider(**kwargs)


def _anthropic(**kwargs) -> BaseChatProvider:
    from model_council.chat.anthropic import AnthropicChatProvider
    return AnthropicChatProvider(**kwargs)


def _openai(**kwargs) -> BaseChatProvider:
    from model_council.chat.openai import OpenAIChatProvider
    return OpenAIChatProvider(**kwargs)


# xAI and OpenRouter speak the OpenAI wire format.
CHAT_PROVIDERS = {
    "google": _google,
    "anthropic": _anthropic,
    "openai": _openai,
    "xai": _openai,
    "openrouter": _openai,
}


def get_chat_provider(
    family: str,
    timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseChatProvider:
    factory = CHAT_PROVIDERS.get(family)
    if factory is None:
        raise ConfigurationError(f"Unknown chat provider family: {family}", provider=family)
    return factory(timeout=timeout, transport=transport)
