"""
Attempt processing: the full per-attempt pipeline.

    problem text + effort signals
        -> mastery classifier  ||  topic classifier
        -> strength estimator + review scheduler
        -> new Attempt and updated TopicProgress for the caller to persist

The caller owns persistence. Two attempts on the same topic processed
concurrently will both start from the same prior progress; whichever the
caller writes last wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from practice_engine.classification.topic_classifier import TopicClassifier, classify_topic
from practice_engine.core.mastery import MasteryLevel, PerformanceTier, ensure_aware, utc_now
from practice_engine.core.models import Attempt, StruggleSignals, TopicProgress
from practice_engine.core.topics import Topic
from practice_engine.study.adaptive_intervals import (
    calculate_performance_tier,
    should_use_adaptive_intervals,
)
from practice_engine.study.mastery_classifier import classify_mastery
from practice_engine.study.scheduler import update_topic_progress_after_attempt


@dataclass(frozen=True)
class AttemptOutcome:
    attempt: Attempt
    progress: TopicProgress
    tier: PerformanceTier | None = None


def _find_progress(all_progress: Sequence[TopicProgress], topic: Topic) -> TopicProgress | None:
    return next((p for p in all_progress if p.topic is topic), None)


def apply_attempt(
    problem_text: str,
    topic: Topic,
    mastery: MasteryLevel,
    turns_taken: int,
    all_progress: Sequence[TopicProgress] = (),
    history: Sequence[Attempt] = (),
    now: datetime | None = None,
) -> AttemptOutcome:
    """
    Schedule an already-classified attempt.

    First attempts on a topic use the adaptive schedule when the learner has
    enough history (5 attempts over 2 topics); otherwise plain SM-2.
    """
    now = ensure_aware(now) if now is not None else utc_now()
    current = _find_progress(all_progress, topic)

    tier = None
    if current is None and should_use_adaptive_intervals(all_progress, history):
        tier = calculate_performance_tier(all_progress, history)

    progress = update_topic_progress_after_attempt(topic, mastery, current, now=now, tier=tier)
    attempt = Attempt(
        problem_text=problem_text,
        topic=topic,
        mastery_level=mastery,
        turns_taken=turns_taken,
        created_at=now,
    )

    logger.info(
        "Recorded attempt: topic={}, mastery={}, turns={}, next review in {} days",
        topic.value, mastery.value, turns_taken, progress.interval_days,
    )
    return AttemptOutcome(attempt=attempt, progress=progress, tier=tier)


def record_attempt(
    problem_text: str,
    turns_taken: int,
    all_progress: Sequence[TopicProgress] = (),
    history: Sequence[Attempt] = (),
    problem_type: str | None = None,
    step_count: int | None = None,
    struggle_signals: StruggleSignals | None = None,
    now: datetime | None = None,
) -> AttemptOutcome:
    """Classify (weighted topic scorer) and schedule one attempt."""
    mastery = classify_mastery(turns_taken, problem_type, step_count, struggle_signals)
    topic = classify_topic(problem_text)
    return apply_attempt(problem_text, topic, mastery, turns_taken, all_progress, history, now)


async def record_attempt_async(
    problem_text: str,
    turns_taken: int,
    classifier: TopicClassifier,
    all_progress: Sequence[TopicProgress] = (),
    history: Sequence[Attempt] = (),
    problem_type: str | None = None,
    step_count: int | None = None,
    struggle_signals: StruggleSignals | None = None,
    now: datetime | None = None,
) -> AttemptOutcome:
    """Like ``record_attempt`` but resolves the topic through the async fallback chain."""
    mastery = classify_mastery(turns_taken, problem_type, step_count, struggle_signals)
    topic = await classifier.classify(problem_text)
    return apply_attempt(problem_text, topic, mastery, turns_taken, all_progress, history, now)
