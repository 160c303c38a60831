"""Tests for exception hierarchy."""

from model_council.exceptions import (
    CapabilityError,
    ConfigurationError,
    GenerationError,
    ModelCouncilError,
    ModerationError,
    ProtocolError,
    TransportError,
    VendorError,
)


def test_all_inherit_from_base():
    for exc_class in [
        GenerationError,
        ConfigurationError, CapabilityError,
        TransportError,
        VendorError, ModerationError,
        ProtocolError,
    ]:
        assert issubclass(exc_class, ModelCouncilError)
        assert issubclass(exc_class, GenerationError) or exc_class is GenerationError


def test_taxonomy_hierarchy():
    assert issubclass(CapabilityError, ConfigurationError)
    assert issubclass(ModerationError, VendorError)
    assert not issubclass(ModerationError, ProtocolError)
    assert not issubclass(TransportError, VendorError)


def test_exception_message():
    e = VendorError("OpenAI API error (500): boom", provider="OpenAI", status_code=500, body="boom")
    assert str(e) == "OpenAI API error (500): boom"
    assert e.provider == "OpenAI"
    assert e.status_code == 500
    assert e.body == "boom"


def test_context_defaults_to_none():
    e = ConfigurationError("key missing")
    assert e.provider is None
    assert e.status_code is None
