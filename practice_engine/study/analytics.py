"""
Progress analytics over attempts and topic progress.

Read-only views used for dashboards and next-topic recommendations.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime

from loguru import logger

from practice_engine.config import get_settings
from practice_engine.core.mastery import MasteryLevel
from practice_engine.core.models import (
    Attempt,
    SessionStats,
    TopicLearningProgress,
    TopicProgress,
)
from practice_engine.core.topics import Topic
from practice_engine.study.scheduler import get_topics_due_for_review
from practice_engine.study.strength import compute_strength_from_history

TREND_MIN_ATTEMPTS = 3
TREND_RECENT_WINDOW = 2
TREND_OLDER_WINDOW = 3
TREND_DELTA = 0.1

RECENT_ATTEMPTS_SHOWN = 5
TOPIC_LIST_LIMIT = 5


def _newest_first(attempts: Sequence[Attempt]) -> list[Attempt]:
    return sorted(attempts, key=lambda a: a.created_at, reverse=True)


def calculate_mastery_trend(attempts: Sequence[Attempt]) -> str:
    """
    Compare the two newest attempts with the three before them.

    Returns 'improving', 'declining' or 'stable' (also for fewer than 3 attempts).
    """
    if len(attempts) < TREND_MIN_ATTEMPTS:
        return "stable"

    ordered = _newest_first(attempts)
    recent = ordered[:TREND_RECENT_WINDOW]
    older = ordered[TREND_RECENT_WINDOW:TREND_RECENT_WINDOW + TREND_OLDER_WINDOW]

    recent_avg = sum(a.mastery_level.strength_score for a in recent) / len(recent)
    older_avg = sum(a.mastery_level.strength_score for a in older) / len(older)
    diff = recent_avg - older_avg

    if diff > TREND_DELTA:
        return "improving"
    if diff < -TREND_DELTA:
        return "declining"
    return "stable"


def analyze_topic_progress(
    topic: Topic,
    attempts: Sequence[Attempt],
    progress: TopicProgress | None,
) -> TopicLearningProgress:
    """Build the analytics view of one topic from the learner's attempts."""
    topic_attempts = _newest_first([a for a in attempts if a.topic is topic])

    average_turns = (
        sum(a.turns_taken for a in topic_attempts) / len(topic_attempts)
        if topic_attempts
        else 0.0
    )

    return TopicLearningProgress(
        topic=topic,
        strength=compute_strength_from_history(topic_attempts),
        last_reviewed=progress.last_reviewed if progress else None,
        next_review=progress.next_review if progress else None,
        review_count=progress.review_count if progress else 0,
        recent_attempts=topic_attempts[:RECENT_ATTEMPTS_SHOWN],
        average_turns=average_turns,
        mastery_trend=calculate_mastery_trend(topic_attempts),
    )


def identify_weak_topics(all_progress: Sequence[TopicProgress]) -> list[TopicProgress]:
    """Up to five topics below the weak threshold, weakest first."""
    threshold = get_settings().weak_topic_threshold
    weak = sorted(
        (p for p in all_progress if p.strength < threshold),
        key=lambda p: p.strength,
    )[:TOPIC_LIST_LIMIT]
    if weak:
        logger.debug(
            "Weak topics: {}",
            ", ".join(f"{p.topic.value} ({p.strength:.2f})" for p in weak),
        )
    return weak


def identify_strong_topics(all_progress: Sequence[TopicProgress]) -> list[TopicProgress]:
    """Up to five topics at or above the strong threshold, strongest first."""
    threshold = get_settings().strong_topic_threshold
    return sorted(
        (p for p in all_progress if p.strength >= threshold),
        key=lambda p: p.strength,
        reverse=True,
    )[:TOPIC_LIST_LIMIT]


def recommend_next_topic(
    all_progress: Sequence[TopicProgress],
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> Topic | None:
    """
    Recommend a single topic to study next.

    Weakest due topic first, then the weakest weak topic, otherwise a random
    topic for maintenance. None when there is no progress at all.
    """
    if not all_progress:
        return None

    due = get_topics_due_for_review(all_progress, now)
    if due:
        return min(due, key=lambda p: p.strength).topic

    weak = identify_weak_topics(all_progress)
    if weak:
        return weak[0].topic

    return (rng or random).choice(list(all_progress)).topic


def summarize_session(attempts: Sequence[Attempt]) -> SessionStats:
    """Counts, average turns, topics covered and mastery breakdown of a session."""
    breakdown = {level.value: 0 for level in MasteryLevel}
    for attempt in attempts:
        breakdown[attempt.mastery_level.value] += 1

    return SessionStats(
        problems_completed=len(attempts),
        average_turns=(
            sum(a.turns_taken for a in attempts) / len(attempts) if attempts else 0.0
        ),
        topics_covered=list(dict.fromkeys(a.topic for a in attempts)),
        mastery_breakdown=breakdown,
    )
