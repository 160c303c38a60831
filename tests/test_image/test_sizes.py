"""Tests for per-vendor aspect-ratio tables."""

from model_council.image.sizes import dimensions, family_sizes, parse_ratio, resolve_size


def test_parse_ratio():
    assert parse_ratio("16:9") == 16 / 9
    assert parse_ratio("1792x1024") == 1.75
    assert parse_ratio("wide") is None
    assert parse_ratio("0:1") is None


def test_dall_e_3_sizes():
    assert resolve_size("openai", "dall-e-3", "1:1") == "1024x1024"
    assert resolve_size("openai", "dall-e-3", "16:9") == "1792x1024"
    assert resolve_size("openai", "dall-e-3", "9:16") == "1024x1792"


def test_gpt_image_sizes():
    assert resolve_size("openai", "gpt-image-1", "16:9") == "1536x1024"
    assert resolve_size("openai", "gpt-image-1", "9:16") == "1024x1536"


def test_unsupported_ratio_falls_back_to_nearest():
    assert resolve_size("openai", "gpt-image-1", "4:3") == "1536x1024"
    assert resolve_size("openai", "dall-e-2", "16:9") == "1024x1024"
    assert resolve_size("google", "imagen-4", "21:9") == "16:9"


def test_unparseable_ratio_uses_family_default():
    assert resolve_size("openai", "dall-e-3", "panorama") == "1024x1024"


def test_family_without_size_control():
    assert family_sizes("xai", "grok-2-image-latest") == ()
    assert resolve_size("xai", "grok-2-image-latest", "16:9") is None
    assert resolve_size("openrouter", "black-forest-labs/flux", "16:9") is None


def test_ratio_string_tables():
    assert resolve_size("google", "gemini-2.5-flash-image", "4:3") == "4:3"
    assert resolve_size("openrouter", "google/gemini-2.5-flash-image", "9:16") == "9:16"


def test_dimensions():
    assert dimensions("1536x1024") == (1536, 1024)
    assert dimensions("16:9") is None
    assert dimensions(None) is None
