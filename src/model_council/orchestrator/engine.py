"""Fan-out of one user action to every active model.

Each participating model gets its own asyncio task. Tasks are independent
and complete in any order; a task writes only to its own model's thread,
and every failure ends as a terminal state on that thread rather than an
exception escaping the fan-out.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

import httpx

from model_council.attachments.codec import parse_data_uri
from model_council.chat.factory import get_chat_provider
from model_council.config import COMPARE_PLACEHOLDER, Settings, resolve_credentials
from model_council.exceptions import ConfigurationError, GenerationError
from model_council.image.factory import get_image_provider
from model_council.models import (
    Attachment,
    GenerateRequest,
    ImageGeneration,
    ImageRequest,
    ImageResult,
    Message,
    ModelDescriptor,
)
from model_council.orchestrator.store import ThreadStore

logger = logging.getLogger(__name__)


def wrap_model_response(name: str, text: str) -> str:
    return f'<model_response name="{name}">{text}</model_response>'


class Orchestrator:
    """Dispatches prompts to models and records the outcomes in a ThreadStore.

    Args:
        settings: Global settings; credentials are snapshotted per dispatch.
        models: Configured models (read-only).
        store: Thread state; a fresh one is created if omitted.
        transport: Optional httpx transport handed to every adapter.
    """

    def __init__(
        self,
        settings: Settings,
        models: Iterable[ModelDescriptor] = (),
        store: ThreadStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.models = list(models)
        self.store = store or ThreadStore()
        self.transport = transport

    def get_model(self, model_id: str) -> ModelDescriptor:
        for model in self.models:
            if model.id == model_id:
                return model
        raise ConfigurationError(f"Unknown model: {model_id}")

    def active_models(self, capability: str = "text") -> list[ModelDescriptor]:
        active = [m for m in self.models if m.enabled and m.has_capability(capability)]
        for model in active:
            self.store.ensure(model.id)
        return active

    # Chat

    async def send(
        self,
        model_id: str,
        text: str,
        attachment: Attachment | None = None,
        history: list[Message] | None = None,
    ) -> Message | None:
        """Single-model send. Returns the model message, or None if the model is busy."""
        task = self._dispatch(self.get_model(model_id), text, attachment, history)
        if task is None:
            return None
        return await task

    def broadcast(self, text: str, attachment: Attachment | None = None) -> dict[str, asyncio.Task]:
        """Start one generation per active text model without waiting for any of them.

        Must be called from a running event loop. The user message is recorded
        in every participating thread before its task starts.
        """
        if not text.strip() and attachment is None:
            return {}
        tasks = {}
        for model in self.active_models("text"):
            task = self._dispatch(model, text, attachment)
            if task is not None:
                tasks[model.id] = task
        logger.info(f"Broadcast to {len(tasks)} model(s): {', '.join(tasks)}")
        return tasks

    async def broadcast_and_wait(self, text: str, attachment: Attachment | None = None) -> dict[str, Message]:
        return await self.wait(self.broadcast(text, attachment))

    def build_compare_prompt(self, target: ModelDescriptor, active: list[ModelDescriptor] | None = None) -> str | None:
        """Compare prompt for ``target`` from the other models' latest replies.

        A model is skipped unless its latest message is a successful model
        reply. Returns None when no other model has one.
        """
        active = self.active_models("text") if active is None else active
        others = []
        for model in active:
            if model.id == target.id:
                continue
            last = self.store.ensure(model.id).last_message
            if last is not None and last.role == "model" and not last.is_error:
                others.append(wrap_model_response(model.name, last.text))
        if not others:
            return None
        return self.settings.compare_prompt_template.replace(COMPARE_PLACEHOLDER, "\n\n".join(others), 1)

    def global_compare(self) -> dict[str, asyncio.Task]:
        """Send every active model the other models' latest responses as a new user turn."""
        active = self.active_models("text")
        if len(active) < 2:
            logger.info("Global compare needs at least 2 active models")
            return {}

        # Build every prompt before dispatching, since dispatch appends user turns.
        prompts = {model.id: self.build_compare_prompt(model, active) for model in active}
        tasks = {}
        for model in active:
            prompt = prompts[model.id]
            if prompt is None:
                logger.info(f"No responses to compare for {model.id}, skipping")
                continue
            task = self._dispatch(model, prompt)
            if task is not None:
                tasks[model.id] = task
        return tasks

    def _dispatch(
        self,
        model: ModelDescriptor,
        text: str,
        attachment: Attachment | None = None,
        history: list[Message] | None = None,
    ) -> asyncio.Task | None:
        # Raises before any thread state changes when there is no running loop.
        loop = asyncio.get_running_loop()
        thread = self.store.ensure(model.id)
        if thread.is_typing:
            logger.warning(f"{model.id} already has a request in flight, skipping")
            return None

        if history is None:
            history = [msg for msg in thread.messages if not msg.is_error]
        request = GenerateRequest(
            model=model,
            history=list(history),
            new_message=text,
            credentials=resolve_credentials(model, self.settings),
            attachment=attachment,
            system_instruction=self.settings.system_prompt or None,
        )

        self.store.append(model.id, Message(role="user", text=text, attachment=attachment))
        self.store.set_error(model.id, None)
        self.store.set_typing(model.id, True)
        return loop.create_task(self._generate(model, request), name=f"generate:{model.id}")

    async def _generate(self, model: ModelDescriptor, request: GenerateRequest) -> Message:
        try:
            provider = get_chat_provider(model.provider, timeout=self.settings.request_timeout, transport=self.transport)
            result = await provider.generate(request)
        except GenerationError as e:
            return self._fail(model, str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure generating with {model.id}")
            return self._fail(model, f"Unexpected error: {e}")
        else:
            logger.info(f"{model.id} responded ({len(result.text)} chars)")
            return self.store.append(model.id, Message(role="model", text=result.text, usage=result.usage))
        finally:
            self.store.set_typing(model.id, False)

    def _fail(self, model: ModelDescriptor, error: str, text: str | None = None) -> Message:
        logger.error(f"{model.id} failed: {error}")
        self.store.set_error(model.id, error)
        return self.store.append(model.id, Message(role="model", text=text or error, is_error=True))

    # Images

    def generate_images(
        self,
        prompt: str,
        reference_images: Iterable[Attachment] = (),
        count: int = 1,
        aspect_ratio: str = "1:1",
        video: bool = False,
    ) -> dict[str, asyncio.Task]:
        """Start one image (or video) generation per active studio model.

        Must be called from a running event loop.
        """
        if not prompt.strip():
            return {}
        loop = asyncio.get_running_loop()
        reference_images = list(reference_images)
        count = max(1, min(count, 4))
        capability = "video" if video else "image"

        tasks = {}
        for model in self.active_models(capability):
            thread = self.store.ensure(model.id)
            if thread.is_typing:
                logger.warning(f"{model.id} already has a request in flight, skipping")
                continue
            request = ImageRequest(
                model=model,
                prompt=prompt,
                credentials=resolve_credentials(model, self.settings),
                count=count,
                aspect_ratio=aspect_ratio,
                reference_images=reference_images,
                video=video,
                model_override=self.settings.image_model_ids.get(model.provider) or None,
            )
            first_reference = reference_images[0] if reference_images else None
            self.store.append(model.id, Message(role="user", text=prompt, attachment=first_reference))
            self.store.set_error(model.id, None)
            self.store.set_typing(model.id, True)
            tasks[model.id] = loop.create_task(self._generate_images(model, request), name=f"images:{model.id}")
        return tasks

    async def _generate_images(self, model: ModelDescriptor, request: ImageRequest) -> Message:
        try:
            provider = get_image_provider(model.provider, timeout=self.settings.request_timeout, transport=self.transport)
            results = await provider.generate_images(request)
        except GenerationError as e:
            return self._fail(model, str(e), text=f"Error: {e}")
        except Exception as e:
            logger.exception(f"Unexpected failure generating images with {model.id}")
            return self._fail(model, f"Unexpected error: {e}", text=f"Error: {e}")
        else:
            for result in results:
                self.store.add_gallery_item(_gallery_item(result, request))
            return self.store.append(model.id, _image_message(results))
        finally:
            self.store.set_typing(model.id, False)

    @staticmethod
    async def wait(tasks: dict[str, asyncio.Task]) -> dict[str, Message]:
        """Wait for every task; results keyed by model id."""
        if not tasks:
            return {}
        messages = await asyncio.gather(*tasks.values())
        return dict(zip(tasks.keys(), messages))


def _gallery_item(result: ImageResult, request: ImageRequest) -> ImageGeneration:
    return ImageGeneration(
        url=result.url,
        mime_type=result.mime_type,
        prompt=request.prompt,
        model_id=request.model.id,
        width=result.width,
        height=result.height,
        seed=result.seed,
        revised_prompt=result.revised_prompt,
    )


def _image_message(results: list[ImageResult]) -> Message:
    """One model message per generation: inline data as the attachment, remote URLs in the text."""
    label = "Generated Video" if results[0].mime_type.startswith("video/") else "Generated Image"
    lines = [label if len(results) == 1 else f"{label} x{len(results)}"]
    if any(result.prompt_truncated for result in results):
        lines.append("(prompt was truncated to the provider's length limit)")
    attachment = None
    for result in results:
        inline = parse_data_uri(result.url)
        if inline and attachment is None:
            extension = inline[0].split("/")[-1]
            attachment = Attachment(mime_type=inline[0], data=inline[1], name=f"generated.{extension}")
        elif not inline:
            lines.append(result.url)
    return Message(role="model", text="\n".join(lines), attachment=attachment)
