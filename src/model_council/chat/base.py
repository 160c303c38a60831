"""Abstract base class for chat provider adapters."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

import httpx

from model_council.exceptions import ConfigurationError
from model_council.models import GenerateRequest, GenerateResult


class BaseChatProvider(ABC):
    """Uniform "generate a response" contract over one vendor wire protocol.

    Args:
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, used to stub the network in tests.
    """

    name: str = "provider"

    def __init__(self, timeout: float = 120.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    @abstractmethod
    async def generate(self, request: GenerateRequest) -> GenerateResult:
        """Send history + new message and return the generated text and usage."""
        ...

    def generate_sync(self, request: GenerateRequest) -> GenerateResult:
        """Synchronous wrapper around :meth:`generate`."""
        return asyncio.run(self.generate(request))

    def _require_api_key(self, request: GenerateRequest) -> str:
        api_key = request.credentials.api_key
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                f"{self.name} API key is missing. "
                f"Add it in settings or on the model '{request.model.id}'.",
                provider=self.name,
            )
        return api_key

    def _base_url(self, request: GenerateRequest, default: str) -> str:
        return (request.credentials.base_url or default).rstrip("/")
