"""
Core records and enumerations shared by all engine components.
"""

from practice_engine.core.errors import (
    ExternalClassifierError,
    InvalidInputError,
    PracticeEngineError,
)
from practice_engine.core.mastery import (
    MASTERY_QUALITY_SCORES,
    MASTERY_STRENGTH_SCORES,
    MasteryLevel,
    PerformanceTier,
    is_valid_ease_factor,
    is_valid_quality,
    is_valid_strength,
)
from practice_engine.core.models import (
    Attempt,
    ReviewSchedule,
    SessionStats,
    SpacedRepetitionCard,
    StruggleSignals,
    TopicLearningProgress,
    TopicProgress,
)
from practice_engine.core.topics import DEFAULT_TOPIC, FOUNDATIONAL_TOPICS, Topic

__all__ = [
    "Attempt",
    "DEFAULT_TOPIC",
    "ExternalClassifierError",
    "FOUNDATIONAL_TOPICS",
    "InvalidInputError",
    "MASTERY_QUALITY_SCORES",
    "MASTERY_STRENGTH_SCORES",
    "MasteryLevel",
    "PerformanceTier",
    "PracticeEngineError",
    "ReviewSchedule",
    "SessionStats",
    "SpacedRepetitionCard",
    "StruggleSignals",
    "Topic",
    "TopicLearningProgress",
    "TopicProgress",
    "is_valid_ease_factor",
    "is_valid_quality",
    "is_valid_strength",
]
