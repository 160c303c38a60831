"""Token usage extraction and accumulation.

Values are copied from provider responses only. When a provider reports no
usage the result is None, and accumulation adds zero.
"""

from __future__ import annotations

import logging
from typing import Any

from model_council.models import TokenUsage

logger = logging.getLogger(__name__)


def _build(provider: str, input_tokens: Any, output_tokens: Any, reported_total: Any = None) -> TokenUsage | None:
    if input_tokens is None and output_tokens is None:
        return None
    try:
        usage = TokenUsage(input_tokens=int(input_tokens or 0), output_tokens=int(output_tokens or 0))
    except (TypeError, ValueError):
        logger.warning(f"{provider} reported malformed usage: {input_tokens!r}/{output_tokens!r}")
        return None
    if reported_total is not None and reported_total != usage.total_tokens:
        logger.debug(
            f"{provider} total_tokens={reported_total} differs from input+output={usage.total_tokens}"
        )
    return usage


def from_openai(payload: dict) -> TokenUsage | None:
    """``usage.prompt_tokens`` / ``usage.completion_tokens`` (OpenAI, xAI, OpenRouter)."""
    usage = payload.get("usage")
    if not isinstance(usage, dict):
        return None
    return _build("openai", usage.get("prompt_tokens"), usage.get("completion_tokens"), usage.get("total_tokens"))


def from_anthropic(usage: Any) -> TokenUsage | None:
    """Anthropic ``usage`` as a dict or an SDK object."""
    if usage is None:
        return None
    if isinstance(usage, dict):
        return _build("anthropic", usage.get("input_tokens"), usage.get("output_tokens"))
    return _build("anthropic", getattr(usage, "input_tokens", None), getattr(usage, "output_tokens", None))


def from_google(payload: dict) -> TokenUsage | None:
    """``usageMetadata.promptTokenCount`` / ``candidatesTokenCount``."""
    usage = payload.get("usageMetadata")
    if not isinstance(usage, dict):
        return None
    return _build(
        "google",
        usage.get("promptTokenCount"),
        usage.get("candidatesTokenCount"),
        usage.get("totalTokenCount"),
    )


def accumulate(total: int, usage: TokenUsage | None) -> int:
    return total + (usage.total_tokens if usage else 0)
