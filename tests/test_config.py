"""Tests for settings and credential resolution."""

import json

import pytest

from model_council.config import (
    DEFAULT_BASE_URLS,
    Settings,
    load_models_from_env,
    mask_key,
    resolve_credentials,
)
from model_council.exceptions import ConfigurationError
from model_council.models import ModelDescriptor


def test_settings_from_env():
    settings = Settings.from_env({
        "GEMINI_API_KEY": "g-key",
        "OPENAI_API_KEY": "o-key",
        "OPENAI_BASE_URL": "http://localhost:8080/v1",
        "MODEL_COUNCIL_TIMEOUT": "30",
    })
    assert settings.api_keys == {"google": "g-key", "openai": "o-key"}
    assert settings.base_urls == {"openai": "http://localhost:8080/v1"}
    assert settings.request_timeout == 30.0


def test_google_key_fallback_name():
    settings = Settings.from_env({"GOOGLE_API_KEY": "alt"})
    assert settings.api_keys["google"] == "alt"


def test_model_override_wins():
    settings = Settings(api_keys={"openai": "global"}, base_urls={"openai": "https://global/v1"})
    model = ModelDescriptor(id="m", name="m", provider="openai", api_key="mine", base_url="https://mine/v1")
    creds = resolve_credentials(model, settings)
    assert creds.api_key == "mine"
    assert creds.base_url == "https://mine/v1"


def test_global_then_default():
    settings = Settings(api_keys={"xai": "global"})
    model = ModelDescriptor(id="grok", name="grok", provider="xai")
    creds = resolve_credentials(model, settings)
    assert creds.api_key == "global"
    assert creds.base_url == DEFAULT_BASE_URLS["xai"]


def test_missing_key_resolves_empty():
    creds = resolve_credentials(ModelDescriptor(id="c", name="c", provider="anthropic"), Settings())
    assert creds.api_key == ""


def test_credentials_are_a_snapshot():
    settings = Settings(api_keys={"openai": "before"})
    model = ModelDescriptor(id="m", name="m", provider="openai")
    creds = resolve_credentials(model, settings)
    settings.api_keys["openai"] = "after"
    assert creds.api_key == "before"


def test_load_models_from_json():
    raw = json.dumps([
        {"id": "gpt-4o", "name": "GPT", "provider": "openai", "capabilities": ["text", "image"]},
        {"id": "local", "provider": "openai", "baseUrl": "http://localhost:1234/v1", "enabled": False},
    ])
    models = load_models_from_env({"MODEL_COUNCIL_MODELS": raw})
    assert models[0].capabilities == ("text", "image")
    assert models[1].name == "local"
    assert models[1].base_url == "http://localhost:1234/v1"
    assert models[1].enabled is False


def test_load_models_invalid_json():
    with pytest.raises(ConfigurationError, match="not valid JSON"):
        load_models_from_env({"MODEL_COUNCIL_MODELS": "[oops"})


def test_load_default_models():
    models = load_models_from_env({"GEMINI_MODEL_ID": "gemini-2.5-pro", "GPT_MODEL_ID": "gpt-4o"})
    assert [(m.provider, m.id) for m in models] == [("google", "gemini-2.5-pro"), ("openai", "gpt-4o")]


def test_mask_key():
    assert mask_key(None) == "(not set)"
    assert mask_key("sk-1234567890abcdef") == "sk-12345...cdef"
    assert "secret" not in mask_key("secret")
