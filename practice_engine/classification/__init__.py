"""
Topic classification: weighted keyword scorer, semantic classifier, cache.
"""

from practice_engine.classification.cache import ClassificationCache
from practice_engine.classification.semantic import SemanticTopicClassifier
from practice_engine.classification.topic_classifier import (
    TopicClassifier,
    classify_topic,
    classify_topic_async,
)
from practice_engine.classification.weighted import (
    TopicClassification,
    classify_topic_with_confidence,
    explain_topic_classification,
)

__all__ = [
    "ClassificationCache",
    "SemanticTopicClassifier",
    "TopicClassification",
    "TopicClassifier",
    "classify_topic",
    "classify_topic_async",
    "classify_topic_with_confidence",
    "explain_topic_classification",
]
