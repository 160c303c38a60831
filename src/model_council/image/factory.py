"""Select an image adapter by provider family."""

from __future__ import annotations

import httpx

from model_council.exceptions import ConfigurationError
from model_council.image.base import BaseImageProvider
from model_council.image.google import GoogleImageProvider
from model_council.image.openai import OpenAIImageProvider
from model_council.image.openrouter import OpenRouterImageProvider
from model_council.image.xai import XAIImageProvider

IMAGE_PROVIDERS: dict[str, type[BaseImageProvider]] = {
    "google": GoogleImageProvider,
    "openai": OpenAIImageProvider,
    "xai": XAIImageProvider,
    "openrouter": OpenRouterImageProvider,
}


def get_image_provider(
    family: str,
    timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseImageProvider:
    provider_cls = IMAGE_PROVIDERS.get(family)
    if provider_cls is None:
        raise ConfigurationError(f"Unknown image provider: {family}", provider=family)
    return provider_cls(timeout=timeout, transport=transport)
