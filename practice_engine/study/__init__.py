"""
Study Module for topic practice.

Provides services for:
- Mastery classification of attempts
- Retention strength estimation
- SM-2 review scheduling with adaptive first intervals
- Interleaved practice selection with interference spacing
- Progress analytics
"""

from practice_engine.study.attempts import AttemptOutcome, apply_attempt, record_attempt, record_attempt_async
from practice_engine.study.interleaver import (
    PracticeInterleaver,
    plan_mixed_session,
    prioritize_topics_for_practice,
    select_practice_set,
)
from practice_engine.study.mastery_classifier import MasteryClassifier, classify_mastery
from practice_engine.study.scheduler import (
    calculate_next_review,
    is_topic_lapsed,
    update_topic_progress_after_attempt,
)
from practice_engine.study.strength import compute_strength_from_history, update_strength

__all__ = [
    "AttemptOutcome",
    "MasteryClassifier",
    "PracticeInterleaver",
    "apply_attempt",
    "calculate_next_review",
    "classify_mastery",
    "compute_strength_from_history",
    "is_topic_lapsed",
    "plan_mixed_session",
    "prioritize_topics_for_practice",
    "record_attempt",
    "record_attempt_async",
    "select_practice_set",
    "update_strength",
    "update_topic_progress_after_attempt",
]
