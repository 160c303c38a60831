"""Unified exception hierarchy for model-council."""

from __future__ import annotations


class ModelCouncilError(Exception):
    """Base exception for all model-council errors."""


class GenerationError(ModelCouncilError):
    """A provider call did not produce a usable result.

    Carries enough context for display: the provider name and, when the
    failure came from an HTTP exchange, the upstream status code and body.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.body = body


# Pre-flight
class ConfigurationError(GenerationError):
    """Missing credential or unusable configuration. Never hits the network."""


class CapabilityError(ConfigurationError):
    """The provider cannot perform the requested kind of generation."""


# Network
class TransportError(GenerationError):
    """DNS, connection, timeout or CORS-class failure before any response."""


# Upstream rejection
class VendorError(GenerationError):
    """Non-2xx response from the provider."""


class ModerationError(VendorError):
    """The provider's safety or moderation system rejected the request."""


# Unusable success
class ProtocolError(GenerationError):
    """2xx response that could not be turned into a usable result."""
