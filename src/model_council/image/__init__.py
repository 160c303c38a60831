"""Image and video generation adapters with per-vendor size tables."""

from model_council.image.base import BaseImageProvider
from model_council.image.factory import IMAGE_PROVIDERS, get_image_provider
from model_council.image.google import GoogleImageProvider
from model_council.image.openai import OpenAIImageProvider
from model_council.image.openrouter import RESPONSE_STRATEGIES, OpenRouterImageProvider, recover_images
from model_council.image.xai import MAX_PROMPT_CHARS, XAIImageProvider, truncate_prompt

__all__ = [
    "BaseImageProvider",
    "IMAGE_PROVIDERS",
    "get_image_provider",
    "GoogleImageProvider",
    "OpenAIImageProvider",
    "OpenRouterImageProvider",
    "XAIImageProvider",
    "RESPONSE_STRATEGIES",
    "recover_images",
    "MAX_PROMPT_CHARS",
    "truncate_prompt",
]
