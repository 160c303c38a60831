"""Data models shared by the adapters and the orchestrator."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Literal

from model_council.attachments.codec import decode_bytes, detect_type, encode_bytes, to_data_uri

Role = Literal["user", "model"]

PROVIDER_FAMILIES = ("google", "anthropic", "openai", "xai", "openrouter")
CAPABILITIES = ("text", "image", "video")


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Attachment:
    """A file attached to a message. ``data`` is base64 text."""

    mime_type: str
    data: str
    name: str

    @classmethod
    def from_bytes(cls, name: str, payload: bytes, hint_type: str = "") -> Attachment:
        return cls(mime_type=detect_type(name, hint_type), data=encode_bytes(payload), name=name)

    @property
    def payload(self) -> bytes:
        return decode_bytes(self.data)

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.mime_type, self.data)


@dataclass(frozen=True)
class TokenUsage:
    """Token counts exactly as reported by a provider."""

    input_tokens: int
    output_tokens: int
    total_tokens: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "total_tokens", self.input_tokens + self.output_tokens)


@dataclass(frozen=True)
class Message:
    """One entry in a conversation thread. Immutable once created."""

    role: Role
    text: str
    id: str = field(default_factory=new_id)
    timestamp: float = field(default_factory=time.time)
    attachment: Attachment | None = None
    usage: TokenUsage | None = None
    is_error: bool = False

    def __post_init__(self):
        if self.role not in ("user", "model"):
            raise ValueError(f"Invalid message role: {self.role!r}")
        if self.role == "user" and self.usage is not None:
            object.__setattr__(self, "usage", None)


@dataclass
class ModelDescriptor:
    """A configured model. Read-only to the engine."""

    id: str
    name: str
    provider: str
    capabilities: tuple[str, ...] = ("text",)
    enabled: bool = True
    api_key: str | None = None
    base_url: str | None = None

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities

    @classmethod
    def from_dict(cls, data: dict) -> ModelDescriptor:
        model_id = data["id"]
        return cls(
            id=model_id,
            name=data.get("name") or model_id,
            provider=data.get("provider", "openai"),
            capabilities=tuple(data.get("capabilities") or ("text",)),
            enabled=bool(data.get("enabled", True)),
            api_key=data.get("api_key") or data.get("apiKey") or None,
            base_url=data.get("base_url") or data.get("baseUrl") or None,
        )


@dataclass
class Thread:
    """Conversation state for one model."""

    model_id: str
    messages: list[Message] = field(default_factory=list)
    is_typing: bool = False
    error: str | None = None
    total_tokens: int = 0

    @property
    def last_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None


@dataclass(frozen=True)
class Credentials:
    """API key and endpoint resolved for one request."""

    api_key: str
    base_url: str | None = None


@dataclass
class GenerateRequest:
    model: ModelDescriptor
    history: list[Message]
    new_message: str
    credentials: Credentials
    attachment: Attachment | None = None
    system_instruction: str | None = None


@dataclass
class GenerateResult:
    text: str
    usage: TokenUsage | None = None


@dataclass
class ImageRequest:
    model: ModelDescriptor
    prompt: str
    credentials: Credentials
    count: int = 1
    aspect_ratio: str = "1:1"
    reference_images: list[Attachment] = field(default_factory=list)
    video: bool = False
    model_override: str | None = None

    @property
    def model_id(self) -> str:
        """Image model to call: studio override first, then the descriptor id."""
        return self.model_override or self.model.id


@dataclass
class ImageResult:
    """One generated image or video. ``url`` is remote or a ``data:`` URI."""

    url: str
    mime_type: str = "image/png"
    width: int | None = None
    height: int | None = None
    seed: int | None = None
    revised_prompt: str | None = None
    prompt_truncated: bool = False

    @property
    def is_inline(self) -> bool:
        return self.url.startswith("data:")


@dataclass
class ImageGeneration:
    """Gallery entry for a generated image."""

    url: str
    mime_type: str
    prompt: str
    model_id: str
    id: str = field(default_factory=new_id)
    timestamp: float = field(default_factory=time.time)
    width: int | None = None
    height: int | None = None
    seed: int | None = None
    revised_prompt: str | None = None
