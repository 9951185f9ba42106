"""
Unit tests for the async topic classifier fallback chain.
"""

import httpx
import pytest

from practice_engine.classification import (
    ClassificationCache,
    SemanticTopicClassifier,
    TopicClassifier,
    classify_topic_async,
)
from practice_engine.classification.topic_classifier import get_shared_cache
from practice_engine.core.errors import ExternalClassifierError, InvalidInputError
from practice_engine.core.topics import Topic


class StubSemantic:
    """Stands in for SemanticTopicClassifier."""

    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.calls = 0
        self.closed = False

    async def classify(self, problem_text):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.answer

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_semantic_answer_is_used_and_cached():
    semantic = StubSemantic(answer=Topic.WORD_PROBLEMS)
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())

    first = await classifier.classify("Solve 2x + 5 < 13")
    second = await classifier.classify("  solve 2x + 5 < 13 ")

    assert first is Topic.WORD_PROBLEMS
    assert second is Topic.WORD_PROBLEMS
    assert semantic.calls == 1
    assert classifier.cache_stats()["size"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", ["timeout", "http_status", "unknown_label"])
async def test_semantic_failure_falls_back_to_weighted(reason):
    semantic = StubSemantic(error=ExternalClassifierError("nope", reason=reason))
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())

    assert await classifier.classify("Solve 2x + 5 < 13") is Topic.INEQUALITIES
    assert len(classifier.cache) == 0


@pytest.mark.asyncio
async def test_without_semantic_uses_weighted_scorer():
    classifier = TopicClassifier(semantic=None, cache=ClassificationCache())
    assert await classifier.classify("Find the derivative of x^3") is Topic.CALCULUS


@pytest.mark.asyncio
async def test_blank_text_skips_semantic():
    semantic = StubSemantic(answer=Topic.GEOMETRY)
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())

    assert await classifier.classify("   ") is Topic.LINEAR_EQUATIONS
    assert semantic.calls == 0


@pytest.mark.asyncio
async def test_non_string_rejected():
    with pytest.raises(InvalidInputError):
        await TopicClassifier(cache=ClassificationCache()).classify(42)


@pytest.mark.asyncio
async def test_clear_cache_and_close():
    semantic = StubSemantic(answer=Topic.GEOMETRY)
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())
    await classifier.classify("area of a circle")

    assert classifier.clear_cache() == 1
    await classifier.close()
    assert semantic.closed


def test_from_settings_enables_semantic_only_with_key(monkeypatch):
    from practice_engine.config import get_settings

    assert TopicClassifier.from_settings().semantic is None

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    assert TopicClassifier.from_settings().semantic is not None


@pytest.mark.asyncio
async def test_one_off_helper_without_key_uses_weighted():
    assert await classify_topic_async("Solve |x - 3| = 7") is Topic.ABSOLUTE_VALUE


@pytest.mark.asyncio
async def test_one_off_helper_reuses_given_classifier():
    semantic = StubSemantic(answer=Topic.TRIGONOMETRY)
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())

    assert await classify_topic_async("sin x = 1/2", classifier) is Topic.TRIGONOMETRY
    assert not semantic.closed


@pytest.mark.asyncio
async def test_unexpected_semantic_error_falls_back():
    semantic = StubSemantic(error=RuntimeError("boom"))
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())

    assert await classifier.classify("Solve 2x + 5 < 13") is Topic.INEQUALITIES
    assert semantic.calls == 1
    assert len(classifier.cache) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [123, ["calculus"], {"topic": "calculus"}])
async def test_non_text_reply_falls_back_to_weighted(content):
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    semantic = SemanticTopicClassifier(
        api_key="test-key",
        base_url="https://llm.example.test/v1",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    classifier = TopicClassifier(semantic=semantic, cache=ClassificationCache())
    try:
        topic = await classifier.classify("Find the derivative of x^3")
    finally:
        await classifier.close()

    assert topic is Topic.CALCULUS
    assert len(classifier.cache) == 0


@pytest.mark.asyncio
async def test_one_off_helper_shares_cache_across_calls(monkeypatch):
    from practice_engine.classification import topic_classifier
    from practice_engine.config import get_settings

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    get_settings.cache_clear()
    semantic = StubSemantic(answer=Topic.WORD_PROBLEMS)
    monkeypatch.setattr(topic_classifier, "SemanticTopicClassifier", lambda: semantic)

    first = await classify_topic_async("A train leaves at 3pm travelling 60 mph")
    second = await classify_topic_async("A train leaves at 3pm travelling 60 mph")

    assert first is second is Topic.WORD_PROBLEMS
    assert semantic.calls == 1
    assert semantic.closed
    assert len(get_shared_cache()) == 1
