"""
Topic classification entry points.

Sync path: weighted keyword scorer, with the legacy rule-based classifier
behind it.

Async path: an ordered chain of strategies sharing one signature,
``async (problem_text) -> Topic | None``:
1. Cached semantic result
2. External semantic classifier (result cached on success)
3. Weighted keyword scorer (never fails)

A strategy returning None or raising ExternalClassifierError hands over to
the next one, so the chain always resolves to a Topic. Any other error from
the semantic step is wrapped as ExternalClassifierError(reason="unexpected").

One-off calls through classify_topic_async share a module-level cache, so
repeated texts hit it across calls.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from loguru import logger

from practice_engine.classification.cache import ClassificationCache
from practice_engine.classification.legacy import infer_topic_legacy
from practice_engine.classification.semantic import SemanticTopicClassifier
from practice_engine.classification.weighted import infer_topic_weighted
from practice_engine.config import get_settings
from practice_engine.core.errors import ExternalClassifierError, InvalidInputError
from practice_engine.core.topics import Topic

Strategy = Callable[[str], Awaitable[Topic | None]]


def _require_text(problem_text: str) -> str:
    if not isinstance(problem_text, str):
        raise InvalidInputError(
            f"problem_text must be a string, got {type(problem_text).__name__}"
        )
    return problem_text


def classify_topic(problem_text: str) -> Topic:
    """
    Classify problem text with the weighted scorer.

    Empty text has no keyword matches and resolves to linear-equations.
    """
    _require_text(problem_text)
    try:
        return infer_topic_weighted(problem_text)
    except Exception as e:
        logger.warning(f"Weighted topic scorer failed, using legacy rules: {e}")
        return infer_topic_legacy(problem_text)


class TopicClassifier:
    """
    Async topic classifier with cache -> semantic -> weighted fallback.

    Args:
        semantic: External classifier; None disables the semantic step
        cache: Cache handle shared across calls; created from settings if None
    """

    def __init__(
        self,
        semantic: SemanticTopicClassifier | None = None,
        cache: ClassificationCache | None = None,
    ):
        self.semantic = semantic
        self.cache = cache or ClassificationCache(
            ttl_seconds=get_settings().classification_cache_ttl_seconds
        )

    @classmethod
    def from_settings(cls, cache: ClassificationCache | None = None) -> TopicClassifier:
        """Enable the semantic step only when an API key is configured."""
        settings = get_settings()
        semantic = SemanticTopicClassifier() if settings.has_semantic_classifier() else None
        return cls(semantic=semantic, cache=cache)

    @property
    def strategies(self) -> list[Strategy]:
        return [self._from_cache, self._from_semantic, self._from_weighted]

    async def _from_cache(self, problem_text: str) -> Topic | None:
        if self.semantic is None:
            return None
        return self.cache.get(problem_text)

    async def _from_semantic(self, problem_text: str) -> Topic | None:
        if self.semantic is None:
            return None
        try:
            topic = await self.semantic.classify(problem_text)
        except ExternalClassifierError:
            raise
        except Exception as e:
            raise ExternalClassifierError(
                f"Unexpected classifier failure: {e!r}", reason="unexpected"
            ) from e
        self.cache.set(problem_text, topic)
        return topic

    async def _from_weighted(self, problem_text: str) -> Topic | None:
        return classify_topic(problem_text)

    async def classify(self, problem_text: str) -> Topic:
        """Resolve a topic through the fallback chain."""
        _require_text(problem_text)

        if not problem_text.strip():
            return await self._from_weighted(problem_text)

        for strategy in self.strategies:
            try:
                topic = await strategy(problem_text)
            except ExternalClassifierError as e:
                logger.warning(f"Semantic classification failed ({e.reason}), falling back: {e}")
                continue
            if topic is not None:
                return topic

        # Unreachable: the weighted scorer always answers
        return classify_topic(problem_text)

    def clear_cache(self) -> int:
        return self.cache.clear()

    def cache_stats(self) -> dict[str, float]:
        return self.cache.stats()

    async def close(self) -> None:
        if self.semantic is not None:
            await self.semantic.close()


_shared_cache: ClassificationCache | None = None


def get_shared_cache() -> ClassificationCache:
    """Cache used by one-off classify_topic_async calls."""
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = ClassificationCache(
            ttl_seconds=get_settings().classification_cache_ttl_seconds
        )
    return _shared_cache


def reset_shared_cache() -> None:
    global _shared_cache
    _shared_cache = None


async def classify_topic_async(
    problem_text: str,
    classifier: TopicClassifier | None = None,
) -> Topic:
    """
    One-off async classification.

    Without a classifier, a short-lived one is built from settings and closed
    afterwards; its results go to the process-wide shared cache.
    """
    if classifier is not None:
        return await classifier.classify(problem_text)

    owned = TopicClassifier.from_settings(cache=get_shared_cache())
    try:
        return await owned.classify(problem_text)
    finally:
        await owned.close()
