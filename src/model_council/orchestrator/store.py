"""In-memory thread state observed by the UI/persistence collaborator."""

from __future__ import annotations

import logging
from typing import Callable

from model_council.models import ImageGeneration, Message, Thread
from model_council.usage import accumulate

logger = logging.getLogger(__name__)

Listener = Callable[[str, Thread], None]


class ThreadStore:
    """Holds one Thread per model, created lazily, plus the image gallery.

    Every change is pushed to subscribed listeners as ``(model_id, thread)``.
    The store never persists anything itself.
    """

    def __init__(self):
        self._threads: dict[str, Thread] = {}
        self._listeners: list[Listener] = []
        self.gallery: list[ImageGeneration] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def threads(self) -> dict[str, Thread]:
        return dict(self._threads)

    def get(self, model_id: str) -> Thread | None:
        return self._threads.get(model_id)

    def ensure(self, model_id: str) -> Thread:
        thread = self._threads.get(model_id)
        if thread is None:
            thread = Thread(model_id=model_id)
            self._threads[model_id] = thread
            logger.debug(f"Created thread for {model_id}")
        return thread

    def append(self, model_id: str, message: Message) -> Message:
        thread = self.ensure(model_id)
        thread.messages.append(message)
        thread.total_tokens = accumulate(thread.total_tokens, message.usage)
        self._notify(model_id, thread)
        return message

    def set_typing(self, model_id: str, is_typing: bool) -> None:
        thread = self.ensure(model_id)
        thread.is_typing = is_typing
        self._notify(model_id, thread)

    def set_error(self, model_id: str, error: str | None) -> None:
        thread = self.ensure(model_id)
        thread.error = error
        self._notify(model_id, thread)

    def add_gallery_item(self, item: ImageGeneration) -> None:
        self.gallery.insert(0, item)

    def _notify(self, model_id: str, thread: Thread) -> None:
        for listener in list(self._listeners):
            try:
                listener(model_id, thread)
            except Exception:
                logger.exception(f"Thread listener failed for {model_id}")
