"""Chat provider adapters (Google, Anthropic, OpenAI-compatible).

Heavy imports are deferred. Use explicit imports:
    from model_council.chat.anthropic import AnthropicChatProvider, normalize_messages
"""

from model_council.chat.base import BaseChatProvider
from model_council.chat.factory import CHAT_PROVIDERS, get_chat_provider


def __getattr__(name):
    """Lazy imports for adapters that require optional dependencies."""
    if name == "GoogleChatProvider":
        from model_council.chat.google import GoogleChatProvider
        return GoogleChatProvider
    if name == "AnthropicChatProvider":
        from model_council.chat.anthropic import AnthropicChatProvider
        return AnthropicChatProvider
    if name == "OpenAIChatProvider":
        from model_council.chat.openai import OpenAIChatProvider
        return OpenAIChatProvider
    raise AttributeError(f"module 'model_council.chat' has no attribute {name!r}")


__all__ = [
    "BaseChatProvider",
    "CHAT_PROVIDERS",
    "get_chat_provider",
    "GoogleChatProvider",
    "AnthropicChatProvider",
    "OpenAIChatProvider",
]
