"""Tests for ThreadStore."""

from model_council.models import ImageGeneration, Message, TokenUsage
from model_council.orchestrator.store import ThreadStore


def test_threads_created_lazily():
    store = ThreadStore()
    assert store.get("gpt") is None
    thread = store.ensure("gpt")
    assert thread is store.ensure("gpt")
    assert store.threads == {"gpt": thread}


def test_listeners_see_every_change():
    store = ThreadStore()
    events = []
    store.subscribe(lambda model_id, thread: events.append((model_id, thread.is_typing, thread.error)))

    store.set_typing("gpt", True)
    store.set_error("gpt", "boom")
    store.append("gpt", Message(role="model", text="hi"))

    assert events == [("gpt", True, None), ("gpt", True, "boom"), ("gpt", True, "boom")]


def test_unsubscribe_stops_notifications():
    store = ThreadStore()
    events = []
    unsubscribe = store.subscribe(lambda model_id, thread: events.append(model_id))
    store.set_typing("gpt", True)
    unsubscribe()
    unsubscribe()
    store.set_typing("gpt", False)
    assert events == ["gpt"]


def test_failing_listener_does_not_block_others():
    store = ThreadStore()
    seen = []

    def broken(model_id, thread):
        raise RuntimeError("listener bug")

    store.subscribe(broken)
    store.subscribe(lambda model_id, thread: seen.append(model_id))
    store.append("gpt", Message(role="user", text="hi"))
    assert seen == ["gpt"]


def test_append_accumulates_tokens():
    store = ThreadStore()
    store.append("gpt", Message(role="user", text="hi"))
    store.append("gpt", Message(role="model", text="a", usage=TokenUsage(10, 5)))
    store.append("gpt", Message(role="model", text="b", usage=TokenUsage(1, 1)))
    assert store.get("gpt").total_tokens == 17


def test_gallery_newest_first():
    store = ThreadStore()
    first = ImageGeneration(url="https://x.test/1.png", mime_type="image/png", prompt="one", model_id="dalle")
    second = ImageGeneration(url="https://x.test/2.png", mime_type="image/png", prompt="two", model_id="dalle")
    store.add_gallery_item(first)
    store.add_gallery_item(second)
    assert store.gallery == [second, first]
