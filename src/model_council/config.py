"""Settings, environment loading and per-request credential resolution."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from model_council.exceptions import ConfigurationError
from model_council.models import Credentials, ModelDescriptor

logger = logging.getLogger(__name__)


DEFAULT_BASE_URLS: dict[str, str] = {
    "google": "https://generativelanguage.googleapis.com/v1beta",
    "anthropic": "https://api.anthropic.com/v1",
    "openai": "https://api.openai.com/v1",
    "xai": "https://api.x.ai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}

COMPARE_PLACEHOLDER = "{{OTHER_RESPONSES}}"

DEFAULT_SYSTEM_PROMPT = "You are a helpful, high-intelligence AI assistant. Be concise and accurate."

DEFAULT_COMPARE_PROMPT = f"""I have collected responses from other AI models regarding our current conversation.
They are provided below, enclosed in <model_response> tags.

Please analyze these alternative perspectives and compare them with your own previous response.
1. Identify key areas of agreement and disagreement.
2. Critique the other approaches. Did they miss something you caught, or vice versa?
3. Synthesize the best insights from all responses into a final, comprehensive recommendation.

{COMPARE_PLACEHOLDER}"""

_KEY_ENV_VARS: dict[str, tuple[str, ...]] = {
    "google": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "anthropic": ("ANTHROPIC_API_KEY",),
    "openai": ("OPENAI_API_KEY",),
    "xai": ("XAI_API_KEY",),
    "openrouter": ("OPENROUTER_API_KEY",),
}

_DEFAULT_MODEL_ENV_VARS: tuple[tuple[str, str], ...] = (
    ("google", "GEMINI_MODEL_ID"),
    ("anthropic", "CLAUDE_MODEL_ID"),
    ("openai", "GPT_MODEL_ID"),
    ("xai", "GROK_MODEL_ID"),
)


def mask_key(key: str | None) -> str:
    """Render an API key safe for logs."""
    if not key:
        return "(not set)"
    if len(key) <= 12:
        return "***"
    return f"{key[:8]}...{key[-4:]}"


@dataclass
class Settings:
    """Global settings supplied by the settings collaborator.

    ``api_keys`` and ``base_urls`` are keyed by provider family. Per-model
    overrides on :class:`ModelDescriptor` take precedence over these.
    """

    api_keys: dict[str, str] = field(default_factory=dict)
    base_urls: dict[str, str] = field(default_factory=dict)
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    compare_prompt_template: str = DEFAULT_COMPARE_PROMPT
    request_timeout: float = 120.0
    image_model_ids: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        api_keys: dict[str, str] = {}
        for family, names in _KEY_ENV_VARS.items():
            for name in names:
                if env.get(name):
                    api_keys[family] = env[name]
                    break
        base_urls = {
            family: env[f"{family.upper()}_BASE_URL"]
            for family in DEFAULT_BASE_URLS
            if env.get(f"{family.upper()}_BASE_URL")
        }
        settings = cls(api_keys=api_keys, base_urls=base_urls)
        if env.get("MODEL_COUNCIL_TIMEOUT"):
            settings.request_timeout = float(env["MODEL_COUNCIL_TIMEOUT"])
        for family in DEFAULT_BASE_URLS:
            logger.debug(f"{family}: key={mask_key(api_keys.get(family))} base_url={base_urls.get(family, '(default)')}")
        return settings


def load_models_from_env(environ: Mapping[str, str] | None = None) -> list[ModelDescriptor]:
    """Build the model list from ``MODEL_COUNCIL_MODELS`` or the per-family model ids."""
    env = os.environ if environ is None else environ
    raw = env.get("MODEL_COUNCIL_MODELS")
    if raw:
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"MODEL_COUNCIL_MODELS is not valid JSON: {e}") from e
        if not isinstance(entries, list):
            raise ConfigurationError("MODEL_COUNCIL_MODELS must be a JSON list of model objects")
        return [ModelDescriptor.from_dict(entry) for entry in entries]

    models = []
    for family, var in _DEFAULT_MODEL_ENV_VARS:
        model_id = env.get(var)
        if model_id:
            models.append(ModelDescriptor(id=model_id, name=model_id, provider=family))
        else:
            logger.info(f"{var} not set, skipping default {family} model")
    return models


def resolve_credentials(model: ModelDescriptor, settings: Settings) -> Credentials:
    """Snapshot the key and endpoint for one request.

    Model-level override > global setting > built-in endpoint. The result is
    frozen, so settings changed mid-flight never affect a dispatched request.
    """
    api_key = (model.api_key or settings.api_keys.get(model.provider) or "").strip()
    base_url = model.base_url or settings.base_urls.get(model.provider) or DEFAULT_BASE_URLS.get(model.provider)
    return Credentials(api_key=api_key, base_url=base_url)
