"""Tests for usage extraction and accumulation."""

from types import SimpleNamespace

from model_council import usage
from model_council.models import Message, TokenUsage
from model_council.orchestrator.store import ThreadStore


def test_token_usage_total_is_sum():
    assert TokenUsage(input_tokens=3, output_tokens=4).total_tokens == 7


def test_from_openai():
    result = usage.from_openai({"usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}})
    assert result == TokenUsage(input_tokens=10, output_tokens=5)
    assert result.total_tokens == 15


def test_from_openai_missing_usage():
    assert usage.from_openai({"choices": []}) is None


def test_from_anthropic_dict_and_object():
    assert usage.from_anthropic({"input_tokens": 7, "output_tokens": 2}).total_tokens == 9
    assert usage.from_anthropic(SimpleNamespace(input_tokens=1, output_tokens=1)).total_tokens == 2
    assert usage.from_anthropic(None) is None


def test_from_google():
    result = usage.from_google({"usageMetadata": {"promptTokenCount": 4, "candidatesTokenCount": 6, "totalTokenCount": 10}})
    assert result.input_tokens == 4
    assert result.output_tokens == 6
    assert result.total_tokens == 10


def test_from_google_without_metadata():
    assert usage.from_google({"candidates": []}) is None


def test_accumulate():
    assert usage.accumulate(5, TokenUsage(input_tokens=1, output_tokens=2)) == 8
    assert usage.accumulate(5, None) == 5


def test_thread_total_equals_sum_of_usage_events():
    store = ThreadStore()
    events = [TokenUsage(10, 5), None, TokenUsage(3, 4), TokenUsage(0, 1)]
    for event in events:
        store.append("m", Message(role="model", text="ok", usage=event))
    assert store.get("m").total_tokens == sum(e.total_tokens for e in events if e)


def test_thread_total_is_zero_without_usage():
    store = ThreadStore()
    store.append("m", Message(role="user", text="hi"))
    store.append("m", Message(role="model", text="hello"))
    assert store.get("m").total_tokens == 0


def test_user_messages_never_carry_usage():
    msg = Message(role="user", text="hi", usage=TokenUsage(1, 1))
    assert msg.usage is None
